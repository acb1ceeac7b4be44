"""Chart workbench: build and save charts from uploaded spreadsheet data.

Workflow:
1. ``load_upload`` fetches the upload's columns and proposes default axes
2. ``generate_chart`` fetches the ``{labels, data}`` series for two columns,
   normalizes it into chart data and saves the chart config to the service
3. ``bar3d_layout`` gives the bar placements of the 3D variant of a chart
4. ``log_download`` records a download in the analytics log
"""

from __future__ import annotations

from typing import Any, Protocol

from ..core.enums import ChartType
from ..core.errors import ChartReportsError, ValidationError
from ..core.logging_config import get_logger
from ..core.models import ChartConfig, ChartData, Dataset, UploadDetail
from ..visuals.bar3d import BarPlacement, bar_layout
from ..visuals.builder import build_chart_data

logger = get_logger(__name__)

DOWNLOAD_ACTION = "chart_download"


class UploadSource(Protocol):
    async def get_upload(self, upload_id: str) -> dict[str, Any]: ...

    async def get_chart_data(self, upload_id: str, x_axis: str, y_axis: str) -> dict[str, Any]: ...

    async def save_chart_config(
        self, upload_id: str, chart_type: str, chart_data: ChartData
    ) -> Any: ...

    async def log_event(
        self, upload_id: str, action: str, details: dict[str, Any] | None = None
    ) -> Any: ...


class ChartWorkbench:
    """Generates chart configs for one uploaded data file at a time."""

    def __init__(self, client: UploadSource) -> None:
        self.client = client

    async def load_upload(self, upload_id: str) -> UploadDetail:
        """Fetch an upload's metadata.

        Raises:
            FetchError: If the upload cannot be fetched
        """
        payload = await self.client.get_upload(upload_id)
        upload = UploadDetail.from_api(payload)
        if not upload.id:
            upload.id = upload_id
        logger.info(
            "Upload loaded",
            extra={"upload_id": upload_id, "columns": len(upload.columns)},
        )
        return upload

    async def generate_chart(
        self,
        upload_id: str,
        chart_type: ChartType | str,
        x_axis: str | None,
        y_axis: str | None,
        title: str | None = None,
    ) -> ChartConfig:
        """Build a chart from two upload columns and save its config.

        Args:
            upload_id: Upload to read the series from
            chart_type: Chart type tag
            x_axis: Column used for the category labels
            y_axis: Column used for the values; also the dataset label
            title: Optional chart title

        Returns:
            The generated chart config with palette-colored chart data

        Raises:
            ValidationError: If an axis is missing or the chart type is unknown
                or is the render-only bar3d variant
            FetchError: If the series cannot be fetched or the config cannot be saved
            ChartDataError: If the series is malformed
        """
        if not x_axis or not y_axis:
            raise ValidationError("Please select both X and Y axes")
        resolved = ChartType.parse(chart_type) if isinstance(chart_type, str) else chart_type
        if resolved is None:
            raise ValidationError(f"Unsupported chart type: {chart_type}")
        if resolved is ChartType.BAR_3D:
            raise ValidationError(
                "bar3d is a view of a saved bar chart; generate a bar chart and use its 3D layout"
            )

        series = await self.client.get_chart_data(upload_id, x_axis, y_axis)
        chart_data = build_chart_data(series, resolved, y_axis)

        stored = ChartData(
            labels=list(chart_data.labels),
            datasets=[Dataset(label=y_axis, data=list(chart_data.primary.data))],
        )
        saved = await self.client.save_chart_config(upload_id, resolved.value, stored)

        chart_id = None
        if isinstance(saved, dict):
            chart_id = saved.get("_id") or saved.get("id")
        logger.info(
            "Chart generated",
            extra={"upload_id": upload_id, "chart_type": resolved.value, "points": len(chart_data.labels)},
        )
        return ChartConfig(
            id=str(chart_id or f"{upload_id}-{resolved.value}"),
            chart_type=resolved.value,
            chart_data=chart_data,
            x_label=x_axis,
            y_label=y_axis,
            title=title or None,
        )

    def bar3d_layout(self, chart: ChartConfig) -> list[BarPlacement]:
        """Placements of the 3D bar variant of ``chart``.

        Raises:
            ValidationError: For pie/doughnut charts or charts without data
        """
        resolved = chart.resolved_type
        if resolved is not None and resolved.is_radial:
            raise ValidationError("3D view is not available for pie charts")
        if chart.chart_data is None or not chart.chart_data.datasets:
            raise ValidationError("Generate the chart before opening the 3D view")
        return bar_layout(chart.chart_data.primary.data)

    async def log_download(self, upload_id: str, fmt: str, chart_type: str) -> bool:
        """Record a chart download. Failures are logged and never raised."""
        try:
            await self.client.log_event(
                upload_id, DOWNLOAD_ACTION, {"format": fmt, "chartType": chart_type}
            )
        except ChartReportsError as e:
            logger.warning(
                f"Analytics logging failed for action {DOWNLOAD_ACTION}",
                extra={"upload_id": upload_id, "error": str(e)},
            )
            return False
        return True
