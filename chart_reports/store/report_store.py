"""Report list loading with per-report chart-config fan-out."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from ..core.errors import ChartDataError
from ..core.logging_config import get_logger
from ..core.models import ChartConfig, Report

logger = get_logger(__name__)


class ReportsSource(Protocol):
    async def list_reports(self) -> list[dict[str, Any]]: ...

    async def get_chart_configs(self, report_id: str) -> list[dict[str, Any]]: ...


def parse_chart_configs(report_id: str, payloads: list[dict[str, Any]]) -> list[ChartConfig]:
    """Parse stored chart configs, giving id-less entries a positional id."""
    return [
        ChartConfig.from_api(payload, fallback_id=f"{report_id}-{index}")
        for index, payload in enumerate(payloads)
    ]


class ReportStore:
    """Loads reports and attaches each report's chart configurations.

    Chart configs are fetched for all reports concurrently. One report failing
    to load its charts leaves that report with an empty chart list; only a
    failed report-list fetch fails the whole load.
    """

    def __init__(self, client: ReportsSource) -> None:
        self.client = client
        self.reports: list[Report] = []
        self.failed_report_ids: list[str] = []

    async def load_reports(self) -> list[Report]:
        """Fetch all reports with their chart configs, in server order.

        Raises:
            FetchError: If the report list itself cannot be fetched
        """
        raw_reports = await self.client.list_reports()

        reports: list[Report] = []
        for payload in raw_reports:
            try:
                reports.append(Report.from_api(payload))
            except ChartDataError as e:
                logger.warning("Skipping malformed report", extra={"error": str(e)})

        results = await asyncio.gather(*(self._load_report(r) for r in reports))

        self.reports = [report for report, _ in results]
        self.failed_report_ids = [report.id for report, ok in results if not ok]

        loaded = len(self.reports) - len(self.failed_report_ids)
        logger.info(
            f"Loaded charts for {loaded}/{len(self.reports)} reports. "
            f"Failures: {len(self.failed_report_ids)}",
            extra={"failed_report_ids": self.failed_report_ids},
        )
        return self.reports

    async def _load_report(self, report: Report) -> tuple[Report, bool]:
        try:
            payloads = await self.client.get_chart_configs(report.id)
            charts = parse_chart_configs(report.id, payloads)
        except Exception as e:
            logger.warning(
                f"Failed to load charts for report {report.id}",
                extra={"report_id": report.id, "error": str(e), "error_type": type(e).__name__},
            )
            return report.with_charts([]), False
        return report.with_charts(charts), True

    def find_chart(self, chart_id: str) -> tuple[Report, ChartConfig] | None:
        for report in self.reports:
            for chart in report.chart_configs:
                if chart.id == chart_id:
                    return report, chart
        return None
