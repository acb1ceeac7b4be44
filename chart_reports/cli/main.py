from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from .. import __version__
from ..analytics.workbench import ChartWorkbench
from ..api.client import ReportsAPIClient
from ..core.config import Settings, get_settings
from ..core.enums import ExportFormat, InsightStatus
from ..core.errors import ChartReportsError
from ..core.logging_config import get_logger, setup_logging
from ..core.notifications import Notifier
from ..insights.controller import InsightSource
from ..insights.generator import InsightsGenerator
from ..render.export import ExportPipeline
from ..view.session import ReportsView, artifact_name
from ..visuals.bar3d import bar_layout
from . import output as cli_output

app = typer.Typer(help="ChartReports CLI")
reports_app = typer.Typer(help="Saved report and chart export commands")
insights_app = typer.Typer(help="Chart insight commands")
charts_app = typer.Typer(help="Chart generation from uploaded data")

logger = get_logger(__name__)


@app.callback()
def callback(
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """Configure global CLI options."""
    setup_logging(json_output=json_logs, log_level=log_level)
    logger.debug("CLI initialized", extra={"json_logs": json_logs, "log_level": log_level})


def _settings() -> Settings:
    try:
        return get_settings()
    except ChartReportsError as e:
        cli_output.error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from None


def _client(settings: Settings) -> ReportsAPIClient:
    return ReportsAPIClient.from_settings(settings)


def _local_generator(settings: Settings) -> InsightsGenerator:
    if not settings.anthropic_api_key:
        cli_output.error(
            "Missing Anthropic API key. Set CR_ANTHROPIC_API_KEY or ANTHROPIC_API_KEY."
        )
        raise typer.Exit(code=1)
    return InsightsGenerator(api_key=settings.anthropic_api_key)


@app.command()
def version() -> None:
    """Print version."""
    typer.echo(__version__)


@reports_app.command("list")
def reports_list() -> None:
    """List saved reports with their charts and insight status."""
    settings = _settings()
    notifier = Notifier(sink=cli_output.show_notification)

    async def run() -> tuple[list, list[str]]:
        async with _client(settings) as client:
            view = ReportsView(client, settings, notifier)
            reports = await view.refresh()
            rows = []
            for report in reports:
                charts = [
                    (
                        chart.id,
                        chart.chart_type,
                        "insight" if not view.insight_control_visible(chart.id) else "no insight",
                        chart.data_error,
                    )
                    for chart in report.chart_configs
                ]
                rows.append((report, charts))
            failed = list(view.store.failed_report_ids)
            view.close()
            return rows, failed

    rows, failed = asyncio.run(run())
    if notifier.errors():
        raise typer.Exit(code=1)
    if not rows:
        cli_output.info("No reports found")
        return

    for report, charts in rows:
        created = report.created_at.strftime("%Y-%m-%d") if report.created_at else "unknown date"
        cli_output.data(f"{report.display_name} ({report.id}) - {created} - Charts: {len(charts)}")
        for chart_id, chart_type, insight_state, data_error in charts:
            line = f"   {chart_id}  {chart_type or '?'}  [{insight_state}]"
            if data_error:
                line += f"  invalid data: {data_error}"
            cli_output.plain(line)
    if failed:
        cli_output.warning(f"Charts could not be loaded for: {', '.join(failed)}")


@reports_app.command("export")
def reports_export(
    chart_id: str = typer.Option(..., "--chart-id", help="Chart config id to export"),
    format: ExportFormat = typer.Option(  # noqa: B008
        ExportFormat.PNG, "--format", case_sensitive=False, help="Artifact format: png or pdf"
    ),
    out_dir: Path | None = typer.Option(  # noqa: B008
        None, "--out-dir", help="Output directory (defaults to CR_EXPORT_DIR)"
    ),
    with_insight: bool = typer.Option(
        False, "--with-insight", help="Generate a missing insight before exporting a PDF"
    ),
) -> None:
    """Export one chart as PNG or as a single-page PDF."""
    settings = _settings()
    notifier = Notifier(sink=cli_output.show_notification)

    async def run() -> Path | None:
        async with _client(settings) as client:
            view = ReportsView(client, settings, notifier)
            try:
                await view.refresh()
                if view.find_chart(chart_id) is None:
                    cli_output.error(f"Chart '{chart_id}' not found")
                    return None
                if format is ExportFormat.PDF:
                    if with_insight and view.insight_for(chart_id) is None:
                        await view.generate_insight(chart_id)
                    return await view.export_pdf(chart_id, out_dir)
                return await view.export_png(chart_id, out_dir)
            finally:
                view.close()

    path = asyncio.run(run())
    if path is None:
        raise typer.Exit(code=1)
    cli_output.success(f"Chart written to {path}")


@insights_app.command("generate")
def insights_generate(
    chart_id: str = typer.Option(..., "--chart-id", help="Chart config id"),
    local: bool = typer.Option(
        False, "--local", help="Ask Claude directly instead of the reports service"
    ),
) -> None:
    """Generate (or show the stored) insight for one chart."""
    settings = _settings()
    notifier = Notifier(sink=cli_output.show_notification)
    source: InsightSource | None = _local_generator(settings) if local else None

    async def run() -> tuple[bool, str | None]:
        async with _client(settings) as client:
            view = ReportsView(client, settings, notifier, insight_source=source)
            try:
                await view.refresh()
                if view.find_chart(chart_id) is None:
                    return False, None
                await view.generate_insight(chart_id)
                if view.insights.status(chart_id) is not InsightStatus.READY:
                    return True, None
                return True, view.insight_for(chart_id)
            finally:
                view.close()

    found, text = asyncio.run(run())
    if not found:
        cli_output.error(f"Chart '{chart_id}' not found")
        raise typer.Exit(code=1)
    if text is None:
        raise typer.Exit(code=1)
    cli_output.data("Insight:")
    cli_output.plain(text)


@charts_app.command("generate")
def charts_generate(
    upload_id: str = typer.Option(..., "--upload-id", help="Uploaded data file id"),
    chart_type: str = typer.Option("bar", "--type", help="bar, line, pie, doughnut or radar"),
    x_axis: str | None = typer.Option(None, "--x-axis", help="Label column (defaults to the first column)"),
    y_axis: str | None = typer.Option(None, "--y-axis", help="Value column (defaults to the second column)"),
    title: str | None = typer.Option(None, "--title", help="Chart title"),
    png: bool = typer.Option(False, "--png", help="Also write the generated chart as PNG"),
    out_dir: Path | None = typer.Option(  # noqa: B008
        None, "--out-dir", help="Output directory for --png (defaults to CR_EXPORT_DIR)"
    ),
) -> None:
    """Generate a chart from two columns of an uploaded file and save its config."""
    settings = _settings()
    notifier = Notifier(sink=cli_output.show_notification)

    async def run() -> Path | str | None:
        async with _client(settings) as client:
            workbench = ChartWorkbench(client)
            x, y = x_axis, y_axis
            try:
                if not x or not y:
                    upload = await workbench.load_upload(upload_id)
                    defaults = upload.default_axes()
                    if defaults:
                        x, y = x or defaults[0], y or defaults[1]
                chart = await workbench.generate_chart(upload_id, chart_type, x, y, title)
            except ChartReportsError as e:
                notifier.notify_failure(e, "Failed to generate chart", "chart")
                return None
            notifier.success("Chart generated successfully!", "chart")

            if not png:
                return chart.id

            pipeline = ExportPipeline(settle_delay=settings.settle_delay_seconds)
            target = Path(out_dir or settings.export_dir) / artifact_name(
                (title or chart.id).replace(" ", "_"), "png"
            )
            try:
                path = await pipeline.export_png(chart, target)
            except ChartReportsError as e:
                notifier.notify_failure(e, "Failed to download PNG", "png")
                return None
            await workbench.log_download(upload_id, ExportFormat.PNG.value, chart.chart_type)
            return path

    result = asyncio.run(run())
    if result is None:
        raise typer.Exit(code=1)
    if isinstance(result, Path):
        cli_output.success(f"Chart written to {result}")
    else:
        cli_output.info(f"Chart id: {result}")


@charts_app.command("layout3d")
def charts_layout3d(
    values: str = typer.Option(..., "--values", help="Comma-separated series values, e.g. 10,20,5"),
) -> None:
    """Print the 3D bar placements for a series."""
    try:
        series = [float(v) for v in values.split(",") if v.strip()]
    except ValueError:
        cli_output.error(f"Values must be numbers: {values}")
        raise typer.Exit(code=1) from None
    if not series:
        cli_output.error("No values given")
        raise typer.Exit(code=1)

    for bar in bar_layout(series):
        cli_output.plain(
            f"bar {bar.index}: value={bar.value:g} height={bar.height:.2f} "
            f"x={bar.x:.2f} center_z={bar.center_z:.2f}"
        )


app.add_typer(reports_app, name="reports")
app.add_typer(insights_app, name="insights")
app.add_typer(charts_app, name="charts")
