"""Reports view session.

``ReportsView`` ties the pieces of the reports screen together for one session:
the loaded reports, which of them are expanded, the charts currently drawn on
screen, the insight cache and the export pipeline. Every user operation is
handled here end to end; failures are turned into notifications and never
escape to the caller.

Usage:
    async with ReportsAPIClient.from_settings(settings) as client:
        view = ReportsView(client, settings)
        await view.refresh()
        view.toggle_report(view.reports[0].id)
        await view.export_png(chart_id)
        view.close()
"""

from __future__ import annotations

from pathlib import Path

from ..core.config import Settings, get_settings
from ..core.errors import ChartReportsError, FetchError, ValidationError
from ..core.logging_config import get_logger
from ..core.models import ChartConfig, Report
from ..core.notifications import Notifier
from ..insights.controller import InsightController, InsightSource
from ..render.export import ExportPipeline, MountedChart
from ..store.report_store import ReportsSource, ReportStore
from ..visuals.adapter import RenderedChart, RenderResult, new_figure, render_config
from .expansion import ExpansionState

logger = get_logger(__name__)


def artifact_name(chart_id: str, extension: str) -> str:
    return f"chart-{chart_id}.{extension}"


class ReportsView:
    """One session of the reports screen."""

    def __init__(
        self,
        client: ReportsSource,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        insight_source: InsightSource | None = None,
        export_pipeline: ExportPipeline | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.notifier = notifier or Notifier()
        self.store = ReportStore(client)
        self.expansion = ExpansionState()
        if insight_source is None:
            insight_source = client  # type: ignore[assignment]
        self.insights = InsightController(insight_source, self.notifier)
        self.exports = export_pipeline or ExportPipeline(
            settle_delay=self.settings.settle_delay_seconds
        )
        self.mounted: dict[str, MountedChart] = {}
        self.placeholders: dict[str, str] = {}
        self.closed = False

    @property
    def reports(self) -> list[Report]:
        return self.store.reports

    async def refresh(self) -> list[Report]:
        """Reload reports and their charts.

        A failed report-list fetch leaves the view empty with an error
        notification. Insights stored with the charts seed the insight cache.
        """
        self._release_all()
        try:
            reports = await self.store.load_reports()
        except FetchError as e:
            self.store.reports = []
            self.notifier.notify_failure(e, "Failed to fetch reports", "reports")
            return []

        for report in reports:
            for chart in report.chart_configs:
                if chart.insight:
                    self.insights.seed(chart.id, chart.insight)
            if self.expansion.is_report_expanded(report.id):
                self._mount_report(report)

        logger.info("Reports view refreshed", extra={"reports": len(reports)})
        return reports

    def find_chart(self, chart_id: str) -> ChartConfig | None:
        found = self.store.find_chart(chart_id)
        return found[1] if found else None

    def _find_report(self, report_id: str) -> Report | None:
        return next((r for r in self.reports if r.id == report_id), None)

    def toggle_report(self, report_id: str) -> bool:
        """Show or hide a report's charts; showing draws them on screen."""
        expanded = self.expansion.toggle_report(report_id)
        report = self._find_report(report_id)
        if report is not None:
            if expanded:
                self._mount_report(report)
            else:
                for chart in report.chart_configs:
                    self._unmount(chart.id)
        return expanded

    def toggle_chart(self, chart_id: str) -> bool:
        return self.expansion.toggle_chart(chart_id)

    def render_chart(self, chart_id: str) -> RenderResult | None:
        """Render a chart on a fresh figure without mounting it."""
        chart = self.find_chart(chart_id)
        if chart is None:
            return None
        return render_config(chart)

    def _mount_report(self, report: Report) -> None:
        for chart in report.chart_configs:
            if chart.id in self.mounted:
                continue
            result = render_config(chart, new_figure())
            if isinstance(result, RenderedChart):
                mounted = MountedChart(chart.id, result.figure)
                mounted.draw()
                self.mounted[chart.id] = mounted
                self.placeholders.pop(chart.id, None)
            else:
                self.placeholders[chart.id] = result.message

    def _unmount(self, chart_id: str) -> None:
        mounted = self.mounted.pop(chart_id, None)
        if mounted is not None:
            mounted.release()
        self.placeholders.pop(chart_id, None)

    def _release_all(self) -> None:
        for chart_id in list(self.mounted):
            self._unmount(chart_id)
        self.placeholders.clear()

    def _out_dir(self, out_dir: Path | None) -> Path:
        return Path(out_dir) if out_dir is not None else self.settings.export_dir

    async def export_png(self, chart_id: str, out_dir: Path | None = None) -> Path | None:
        """Download a chart as PNG.

        A chart drawn on screen is captured as displayed; any other chart is
        rendered off-screen first.
        """
        key = f"png-{chart_id}"
        chart = self.find_chart(chart_id)
        if chart is None:
            self.notifier.notify_failure(
                ValidationError(f"Chart {chart_id} not found"), "Failed to download PNG", key
            )
            return None

        path = self._out_dir(out_dir) / artifact_name(chart_id, "png")
        self.notifier.loading("Preparing PNG download...", key)
        try:
            mounted = self.mounted.get(chart_id)
            if mounted is not None:
                result = self.exports.export_png_onscreen(mounted, path)
            else:
                result = await self.exports.export_png(chart, path)
        except ChartReportsError as e:
            self.notifier.notify_failure(e, "Failed to download PNG", key)
            return None

        self.notifier.success("PNG downloaded successfully!", key)
        return result

    async def export_pdf(self, chart_id: str, out_dir: Path | None = None) -> Path | None:
        """Download a chart as a one-page PDF, including its insight when known."""
        key = f"pdf-{chart_id}"
        chart = self.find_chart(chart_id)
        if chart is None:
            self.notifier.notify_failure(
                ValidationError(f"Chart {chart_id} not found"), "Failed to download PDF", key
            )
            return None

        path = self._out_dir(out_dir) / artifact_name(chart_id, "pdf")
        self.notifier.loading("Preparing PDF download...", key)
        try:
            result = await self.exports.export_pdf(chart, path, self.insight_for(chart_id))
        except ChartReportsError as e:
            self.notifier.notify_failure(e, "Failed to download PDF", key)
            return None

        self.notifier.success("PDF downloaded successfully!", key)
        return result

    async def generate_insight(self, chart_id: str) -> str | None:
        chart = self.find_chart(chart_id)
        if chart is None:
            self.notifier.notify_failure(
                ValidationError(f"Chart {chart_id} not found"),
                "Failed to generate insight",
                f"insight-{chart_id}",
            )
            return None
        entry = await self.insights.generate(chart)
        return entry.text

    def insight_for(self, chart_id: str) -> str | None:
        text = self.insights.text(chart_id)
        if text:
            return text
        chart = self.find_chart(chart_id)
        return chart.insight if chart is not None else None

    def insight_control_visible(self, chart_id: str) -> bool:
        return self.insights.control_visible(chart_id)

    def close(self) -> None:
        """End the session: drop on-screen charts and silence notifications.

        Exports already running still finish and clean up their own renderers.
        """
        if self.closed:
            return
        self.closed = True
        self.notifier.mute()
        self._release_all()
        logger.debug("Reports view closed")
