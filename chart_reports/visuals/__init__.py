"""Visualization package for chart reports.

This package turns stored chart configurations into drawn charts. It is the
presentation layer between the normalized chart data model and the export
pipeline.

Key Capabilities:
    1. Palette-based normalization of raw {labels, data} series (builder)
    2. Type-tag dispatch to matplotlib renderers (bar, line, pie, doughnut, radar)
    3. Proportional 3D bar variant with bottom-anchored, centered bars
    4. Explicit placeholder results for unknown types and malformed data

Usage:
    from chart_reports.visuals import build_chart_data, render

    chart_data = build_chart_data({"labels": ["Jan", "Feb"], "data": [1, 2]}, "bar", "Revenue")
    result = render("bar", chart_data)

Architecture Notes:
    - Figures are detached from pyplot and own their Agg canvas
    - Rendering is stateless; callers own and release figures
"""

from __future__ import annotations

from .adapter import InvalidChart, RenderedChart, UnsupportedChart, render, render_config
from .builder import build_chart_data

__all__ = [
    "InvalidChart",
    "RenderedChart",
    "UnsupportedChart",
    "build_chart_data",
    "render",
    "render_config",
]
