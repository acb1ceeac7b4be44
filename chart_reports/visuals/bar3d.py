"""Proportional 3D bar chart.

Bar heights are scaled so the largest value reaches ``MAX_BAR_HEIGHT``. Bars
are spaced ``BAR_SPACING`` apart along x with the sequence midpoint at 0, and
every bar stands on the z=0 plane (its center sits at ``height / 2``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from matplotlib.figure import Figure

from ..core.models import ChartData
from .colors import hsl_color
from .renderers import RenderOptions

MAX_BAR_HEIGHT = 7.0
BAR_SPACING = 2.0
BAR_WIDTH = 1.0
BAR_DEPTH = 1.0


@dataclass(frozen=True)
class BarPlacement:
    index: int
    value: float
    height: float
    x: float
    center_z: float

    @property
    def base_z(self) -> float:
        return self.center_z - self.height / 2


def scaled_heights(values: Sequence[float], max_bar_height: float = MAX_BAR_HEIGHT) -> list[float]:
    """Heights proportional to ``values``; unit height when max(values) <= 0."""
    if not values:
        return []
    peak = max(values)
    if peak <= 0:
        return [1.0 for _ in values]
    return [v / peak * max_bar_height for v in values]


def bar_layout(
    values: Sequence[float],
    *,
    max_bar_height: float = MAX_BAR_HEIGHT,
    spacing: float = BAR_SPACING,
) -> list[BarPlacement]:
    n = len(values)
    return [
        BarPlacement(
            index=i,
            value=float(v),
            height=h,
            x=(i - n / 2) * spacing,
            center_z=h / 2,
        )
        for i, (v, h) in enumerate(zip(values, scaled_heights(values, max_bar_height), strict=True))
    ]


def render_bar3d(fig: Figure, chart_data: ChartData, options: RenderOptions) -> None:
    ax = fig.add_subplot(1, 1, 1, projection="3d")
    placements = bar_layout(chart_data.primary.data)

    for bar in placements:
        ax.bar3d(
            bar.x - BAR_WIDTH / 2,
            -BAR_DEPTH / 2,
            bar.base_z,
            BAR_WIDTH,
            BAR_DEPTH,
            bar.height,
            color=hsl_color(bar.index * 60),
            shade=True,
        )

    if placements:
        ax.set_xticks([bar.x for bar in placements])
        ax.set_xticklabels(chart_data.labels, fontsize=8)
    ax.set_yticks([])
    ax.set_zlim(0, max([MAX_BAR_HEIGHT] + [bar.height for bar in placements]))
    if options.axes is not None and options.axes.x.display:
        ax.set_xlabel(options.axes.x.text)
    if options.axes is not None and options.axes.y.display:
        ax.set_zlabel(options.axes.y.text)
    ax.set_title(options.title or "3D Chart", fontsize=14, fontweight="bold")
