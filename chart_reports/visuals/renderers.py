"""Matplotlib renderers for the 2D chart families.

Each renderer draws one ``ChartData`` onto a caller-owned ``Figure``. Figures
are created detached from pyplot (``Figure`` + Agg canvas), so rendering never
touches pyplot's global figure registry and the caller decides when a figure
is released.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

import matplotlib
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..core.enums import ChartType
from ..core.models import ChartData, Color, Dataset
from .colors import palette_color, to_mpl_color, with_full_opacity

# Use non-interactive backend for server environments
matplotlib.use("Agg")

DEFAULT_X_TITLE = "X-Axis"
DEFAULT_Y_TITLE = "Y-Axis"


@dataclass(frozen=True)
class AxisTitle:
    text: str
    display: bool


@dataclass(frozen=True)
class AxesOptions:
    x: AxisTitle
    y: AxisTitle


@dataclass(frozen=True)
class RenderOptions:
    title: str = "Chart"
    show_legend: bool = True
    axes: AxesOptions | None = None
    animation: bool = True


def build_render_options(
    chart_type: ChartType,
    x_label: str | None = None,
    y_label: str | None = None,
    title: str | None = None,
    *,
    animation: bool = True,
) -> RenderOptions:
    """Options for a chart type; pie and doughnut charts get no axes."""
    axes = None
    if not chart_type.is_radial:
        axes = AxesOptions(
            x=AxisTitle(text=x_label or DEFAULT_X_TITLE, display=bool(x_label)),
            y=AxisTitle(text=y_label or DEFAULT_Y_TITLE, display=bool(y_label)),
        )
    return RenderOptions(title=title or "Chart", axes=axes, animation=animation)


Renderer = Callable[[Figure, ChartData, RenderOptions], None]


def _series_colors(color: Color | None, count: int, fallback_index: int) -> list:
    if isinstance(color, list) and color:
        return [to_mpl_color(color[i % len(color)]) for i in range(count)]
    if isinstance(color, str) and color:
        return [to_mpl_color(color)] * count
    return [to_mpl_color(palette_color(fallback_index))] * count


def _line_color(ds: Dataset, index: int):
    if isinstance(ds.border_color, str) and ds.border_color:
        return to_mpl_color(ds.border_color)
    return to_mpl_color(with_full_opacity(palette_color(index)))


def _decorate(fig: Figure, ax: Axes, options: RenderOptions) -> None:
    ax.set_title(options.title, fontsize=14, fontweight="bold")
    if options.axes is not None:
        if options.axes.x.display:
            ax.set_xlabel(options.axes.x.text, fontsize=11)
        if options.axes.y.display:
            ax.set_ylabel(options.axes.y.text, fontsize=11)
    if options.show_legend and ax.get_legend_handles_labels()[0]:
        ax.legend(loc="upper right")
    fig.tight_layout()


def render_bar(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    ax = fig.add_subplot(1, 1, 1)
    x = np.arange(len(chart_data.labels))
    n = len(chart_data.datasets)
    width = 0.8 / n

    for i, ds in enumerate(chart_data.datasets):
        offset = (i - (n - 1) / 2) * width
        ax.bar(
            x + offset,
            ds.data,
            width,
            label=ds.label or None,
            color=_series_colors(ds.background_color, len(ds.data), i),
            edgecolor=_series_colors(ds.border_color, len(ds.data), i),
            linewidth=ds.border_width,
        )

    ax.set_xticks(x)
    ax.set_xticklabels(chart_data.labels, rotation=45, ha="right")
    ax.grid(axis="y", alpha=0.3)
    _decorate(fig, ax, options)


def render_line(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    ax = fig.add_subplot(1, 1, 1)
    x = np.arange(len(chart_data.labels))

    for i, ds in enumerate(chart_data.datasets):
        ax.plot(
            x,
            ds.data,
            color=_line_color(ds, i),
            marker="o",
            linewidth=2,
            label=ds.label or None,
        )

    ax.set_xticks(x)
    ax.set_xticklabels(chart_data.labels, rotation=45, ha="right")
    ax.grid(axis="y", alpha=0.3)
    _decorate(fig, ax, options)


def _render_radial(
    fig: Figure, chart_data: ChartData, options: RenderOptions, ring_width: float | None
) -> None:
    ax = fig.add_subplot(1, 1, 1)
    ds = chart_data.primary
    # Matplotlib refuses negative wedges; Chart.js skips them too
    sizes = [max(v, 0.0) for v in ds.data]
    if not any(sizes):
        raise ValueError("Pie charts need at least one positive value")

    wedgeprops: dict = {"linewidth": ds.border_width}
    if ring_width is not None:
        wedgeprops["width"] = ring_width
    wedges, _ = ax.pie(
        sizes,
        colors=_series_colors(ds.background_color, len(sizes), 0),
        startangle=90,
        counterclock=False,
        wedgeprops=wedgeprops,
    )
    for wedge, edge in zip(wedges, _series_colors(ds.border_color, len(sizes), 0), strict=True):
        wedge.set_edgecolor(edge)
    ax.axis("equal")
    if options.show_legend:
        ax.legend(wedges, chart_data.labels, loc="center left", bbox_to_anchor=(1.0, 0.5))
    ax.set_title(options.title, fontsize=14, fontweight="bold")
    fig.tight_layout()


def render_pie(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    _render_radial(fig, chart_data, options, ring_width=None)


def render_doughnut(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    _render_radial(fig, chart_data, options, ring_width=0.45)


def render_radar(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    count = len(chart_data.labels)
    if count < 3:
        raise ValueError("Radar charts need at least three categories")

    ax = fig.add_subplot(1, 1, 1, projection="polar")
    angles = [n / float(count) * 2 * math.pi for n in range(count)]
    angles += angles[:1]  # Close the polygon

    for i, ds in enumerate(chart_data.datasets):
        values = list(ds.data) + ds.data[:1]
        color = _line_color(ds, i)
        ax.plot(angles, values, "o-", color=color, linewidth=2, label=ds.label or None)
        ax.fill(angles, values, color=color, alpha=0.1)

    ax.set_xticks(angles[:-1])
    ax.set_xticklabels(chart_data.labels, fontsize=10)
    ax.set_title(options.title, fontsize=14, fontweight="bold", pad=20)
    if options.show_legend and ax.get_legend_handles_labels()[0]:
        ax.legend(loc="upper right", bbox_to_anchor=(1.3, 1.1), fontsize=9)
    fig.tight_layout()
