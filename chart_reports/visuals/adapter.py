"""Chart type dispatch.

``render`` looks the chart type up in a fixed table and draws the chart onto a
detached matplotlib figure. The outcome is always one of three results:

    RenderedChart    the chart was drawn
    UnsupportedChart the type tag matches no registered renderer
    InvalidChart     the chart data is missing or the renderer rejected it

Callers display the placeholder message of the last two; nothing here raises
for bad input and there is no silent fallback to a default renderer.
"""

from __future__ import annotations

from dataclasses import dataclass

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..core.enums import ChartType
from ..core.logging_config import get_logger
from ..core.models import ChartConfig, ChartData
from .bar3d import render_bar3d
from .renderers import (
    Renderer,
    RenderOptions,
    build_render_options,
    render_bar,
    render_doughnut,
    render_line,
    render_pie,
    render_radar,
)

logger = get_logger(__name__)

INVALID_DATA_MESSAGE = "Chart data is missing or invalid."

# Figure size in inches at DEFAULT_DPI (800x600 px)
DEFAULT_FIGSIZE = (8.0, 6.0)
DEFAULT_DPI = 100

RENDERERS: dict[ChartType, Renderer] = {
    ChartType.BAR: render_bar,
    ChartType.LINE: render_line,
    ChartType.PIE: render_pie,
    ChartType.DOUGHNUT: render_doughnut,
    ChartType.RADAR: render_radar,
    ChartType.BAR_3D: render_bar3d,
}

_missing = set(ChartType) - set(RENDERERS)
if _missing:
    raise RuntimeError(f"No renderer registered for: {sorted(t.value for t in _missing)}")


@dataclass
class RenderedChart:
    chart_type: ChartType
    figure: Figure


@dataclass(frozen=True)
class UnsupportedChart:
    chart_type: str

    @property
    def message(self) -> str:
        return f"Unsupported chart type: {self.chart_type}"


@dataclass(frozen=True)
class InvalidChart:
    message: str = INVALID_DATA_MESSAGE


RenderResult = RenderedChart | UnsupportedChart | InvalidChart


def new_figure(figsize: tuple[float, float] = DEFAULT_FIGSIZE, dpi: int = DEFAULT_DPI) -> Figure:
    """Create a figure with its own Agg canvas, outside pyplot's registry."""
    fig = Figure(figsize=figsize, dpi=dpi)
    FigureCanvasAgg(fig)
    return fig


def render(
    chart_type: str,
    chart_data: ChartData | None,
    options: RenderOptions | None = None,
    figure: Figure | None = None,
) -> RenderResult:
    """Render chart data with the renderer registered for ``chart_type``.

    Args:
        chart_type: Chart type tag, matched case-insensitively
        chart_data: Normalized chart data, or None when it failed to parse
        options: Render options; defaults are derived from the chart type
        figure: Figure to draw on; a new detached figure is created when omitted

    Returns:
        RenderedChart, UnsupportedChart or InvalidChart
    """
    resolved = ChartType.parse(chart_type)
    if resolved is None:
        logger.info("Unsupported chart type", extra={"chart_type": chart_type})
        return UnsupportedChart(chart_type=chart_type)

    if chart_data is None or not chart_data.labels or not chart_data.datasets:
        return InvalidChart()

    if options is None:
        options = build_render_options(resolved)

    fig = figure if figure is not None else new_figure()
    try:
        RENDERERS[resolved](fig, chart_data, options)
    except (ValueError, TypeError, IndexError) as e:
        logger.warning(
            f"Renderer rejected chart data: {e}",
            extra={"chart_type": resolved.value},
        )
        fig.clear()
        return InvalidChart()

    return RenderedChart(chart_type=resolved, figure=fig)


def render_config(
    chart: ChartConfig, figure: Figure | None = None, *, animation: bool = True
) -> RenderResult:
    """Render a stored chart config with options derived from its labels."""
    resolved = chart.resolved_type
    if resolved is None:
        return UnsupportedChart(chart_type=chart.chart_type)
    if chart.chart_data is None:
        return InvalidChart()
    options = build_render_options(
        resolved, chart.x_label, chart.y_label, chart.title, animation=animation
    )
    return render(chart.chart_type, chart.chart_data, options, figure)
