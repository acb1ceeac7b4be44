"""Normalize raw spreadsheet series into renderer-neutral chart data."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..core.enums import ChartType
from ..core.errors import ChartDataError
from ..core.logging_config import get_logger
from ..core.models import ChartData, Dataset, coerce_number
from .colors import palette_color, palette_colors, with_full_opacity

logger = get_logger(__name__)


def _series_parts(series: Mapping[str, Any]) -> tuple[Sequence[Any], Sequence[Any]]:
    labels = series.get("labels")
    data = series.get("data")
    if not isinstance(labels, Sequence) or isinstance(labels, str):
        raise ChartDataError("Series is missing its labels")
    if not isinstance(data, Sequence) or isinstance(data, str):
        raise ChartDataError("Series is missing its data")
    return labels, data


def build_chart_data(
    series: Mapping[str, Any], chart_type: ChartType | str, label: str
) -> ChartData:
    """Build chart data with palette colors from a ``{labels, data}`` series.

    Args:
        series: Raw series as returned by the chart-data endpoint
        chart_type: Target chart type; pie/doughnut get one color per slice
        label: Dataset label (usually the y-axis column name)

    Returns:
        ChartData with a single dataset

    Raises:
        ChartDataError: If labels and data differ in length or a value is not numeric
    """
    labels, raw_data = _series_parts(series)
    if len(labels) != len(raw_data):
        raise ChartDataError(
            f"Series has {len(raw_data)} values for {len(labels)} labels"
        )
    data = [coerce_number(v) for v in raw_data]

    resolved = ChartType.parse(chart_type) if isinstance(chart_type, str) else chart_type
    if resolved is not None and resolved.is_radial:
        background: str | list[str] = palette_colors(len(data))
        border: str | list[str] = [with_full_opacity(c) for c in background]
    else:
        background = palette_color(0)
        border = with_full_opacity(background)

    logger.debug(
        "Built chart data",
        extra={"chart_type": str(chart_type), "points": len(data), "label": label},
    )
    return ChartData(
        labels=[str(v) for v in labels],
        datasets=[
            Dataset(
                label=label,
                data=data,
                background_color=background,
                border_color=border,
                border_width=1,
            )
        ],
    ).validate()
