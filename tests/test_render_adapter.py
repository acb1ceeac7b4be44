"""Tests for chart type dispatch and the 2D renderers."""

from __future__ import annotations

import pytest
from conftest import chart_payload
from matplotlib.figure import Figure

from chart_reports.core.enums import ChartType
from chart_reports.core.models import ChartConfig, ChartData, Dataset
from chart_reports.visuals import adapter
from chart_reports.visuals.adapter import (
    INVALID_DATA_MESSAGE,
    RENDERERS,
    InvalidChart,
    RenderedChart,
    UnsupportedChart,
    new_figure,
    render,
    render_config,
)
from chart_reports.visuals.builder import build_chart_data
from chart_reports.visuals.renderers import build_render_options


def _data(labels: list[str], values: list[float]) -> ChartData:
    return ChartData(labels=labels, datasets=[Dataset(label="Sales", data=values)])


def test_every_chart_type_has_a_renderer() -> None:
    assert set(RENDERERS) == set(ChartType)


class TestRender:
    """render() results for supported, unsupported and invalid input."""

    @pytest.mark.parametrize("chart_type", [t.value for t in ChartType])
    def test_supported_types_render(self, chart_type: str) -> None:
        series = {"labels": ["a", "b", "c"], "data": [3, 1, 2]}
        result = render(chart_type, build_chart_data(series, chart_type, "Sales"))
        assert isinstance(result, RenderedChart)
        assert result.chart_type is ChartType(chart_type)
        assert isinstance(result.figure, Figure)
        assert result.figure.axes

    def test_type_tag_is_case_insensitive(self) -> None:
        result = render("BAR", _data(["a"], [1]))
        assert isinstance(result, RenderedChart)
        assert result.chart_type is ChartType.BAR

    def test_unknown_type_renders_placeholder(self) -> None:
        result = render("scatter3d", _data(["a"], [1]))
        assert isinstance(result, UnsupportedChart)
        assert result.message == "Unsupported chart type: scatter3d"

    def test_missing_data_renders_placeholder(self) -> None:
        result = render("bar", None)
        assert isinstance(result, InvalidChart)
        assert result.message == INVALID_DATA_MESSAGE == "Chart data is missing or invalid."

    def test_renderer_rejection_clears_figure(self) -> None:
        fig = new_figure()
        result = render("radar", _data(["a", "b"], [1, 2]), figure=fig)
        assert isinstance(result, InvalidChart)
        assert fig.axes == []

    def test_pie_without_positive_values_is_invalid(self) -> None:
        assert isinstance(render("pie", _data(["a", "b"], [0, -1])), InvalidChart)

    def test_draws_on_given_figure(self) -> None:
        fig = new_figure()
        result = render("line", _data(["a", "b"], [1, 2]), figure=fig)
        assert isinstance(result, RenderedChart)
        assert result.figure is fig


class TestRenderOptions:
    """Axis titles derived from chart labels."""

    def test_radial_types_have_no_axes(self) -> None:
        assert build_render_options(ChartType.PIE, "x", "y").axes is None
        assert build_render_options(ChartType.DOUGHNUT).axes is None

    def test_axis_titles_default_and_hidden(self) -> None:
        options = build_render_options(ChartType.BAR, None, "Revenue", None)
        assert options.axes is not None
        assert options.axes.x.text == "X-Axis"
        assert options.axes.x.display is False
        assert options.axes.y.text == "Revenue"
        assert options.axes.y.display is True
        assert options.title == "Chart"

    def test_render_config_applies_labels(self, bar_chart: ChartConfig) -> None:
        result = render_config(bar_chart)
        assert isinstance(result, RenderedChart)
        ax = result.figure.axes[0]
        assert ax.get_xlabel() == "Month"
        assert ax.get_ylabel() == "Revenue"

    def test_render_config_with_broken_data(self) -> None:
        chart = ChartConfig.from_api(chart_payload(labels=["a", "b"], data=[1]))
        assert isinstance(render_config(chart), InvalidChart)

    def test_render_config_unknown_type(self) -> None:
        chart = ChartConfig.from_api(chart_payload(chart_type="scatter3d"))
        result = render_config(chart)
        assert isinstance(result, UnsupportedChart)
        assert result.message == "Unsupported chart type: scatter3d"


def test_figures_stay_out_of_pyplot() -> None:
    import matplotlib.pyplot as plt

    before = plt.get_fignums()
    render("bar", _data(["a"], [1]))
    assert plt.get_fignums() == before
    assert adapter.DEFAULT_DPI == 100
