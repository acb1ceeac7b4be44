"""Tests for the chart/report data model."""

from __future__ import annotations

import pytest
from conftest import chart_payload

from chart_reports.core.enums import ChartType
from chart_reports.core.errors import ChartDataError
from chart_reports.core.models import (
    ChartConfig,
    ChartData,
    Dataset,
    InsightRequest,
    Report,
    UploadDetail,
    coerce_number,
)


class TestChartData:
    """ChartData parsing and the label/data length invariant."""

    def test_from_api_valid(self) -> None:
        data = ChartData.from_api(
            {"labels": ["a", "b"], "datasets": [{"label": "x", "data": [1, "2.5"]}]}
        )
        assert data.labels == ["a", "b"]
        assert data.primary.data == [1.0, 2.5]
        assert data.primary.border_width == 1

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ChartDataError, match="2 values for 3 labels"):
            ChartData.from_api(
                {"labels": ["a", "b", "c"], "datasets": [{"label": "x", "data": [1, 2]}]}
            )

    def test_missing_datasets_rejected(self) -> None:
        with pytest.raises(ChartDataError):
            ChartData.from_api({"labels": ["a"]})

    def test_no_datasets_rejected(self) -> None:
        with pytest.raises(ChartDataError, match="no datasets"):
            ChartData(labels=["a"], datasets=[]).validate()

    def test_non_numeric_value_rejected(self) -> None:
        with pytest.raises(ChartDataError, match="numeric"):
            ChartData.from_api({"labels": ["a"], "datasets": [{"data": ["lots"]}]})

    def test_border_width(self) -> None:
        payload = {"labels": ["a"], "datasets": [{"data": [1], "borderWidth": "2"}]}
        assert ChartData.from_api(payload).primary.border_width == 2
        payload["datasets"][0]["borderWidth"] = None
        assert ChartData.from_api(payload).primary.border_width == 1

    def test_non_numeric_border_width_rejected(self) -> None:
        with pytest.raises(ChartDataError, match="border width"):
            ChartData.from_api(
                {"labels": ["a"], "datasets": [{"data": [1], "borderWidth": "thick"}]}
            )

    def test_to_api_uses_camel_case(self) -> None:
        ds = Dataset(label="x", data=[1.0], background_color="red", border_color="blue")
        assert ChartData(labels=["a"], datasets=[ds]).to_api() == {
            "labels": ["a"],
            "datasets": [
                {
                    "label": "x",
                    "data": [1.0],
                    "backgroundColor": "red",
                    "borderColor": "blue",
                    "borderWidth": 1,
                }
            ],
        }


def test_coerce_number_rejects_bool() -> None:
    with pytest.raises(ChartDataError):
        coerce_number(True)
    assert coerce_number(" 3 ") == 3.0


class TestChartConfig:
    """Stored chart config parsing."""

    def test_from_api(self) -> None:
        chart = ChartConfig.from_api(
            chart_payload("c9", "LINE", xLabel="Month", insights="Upward trend")
        )
        assert chart.id == "c9"
        assert chart.resolved_type is ChartType.LINE
        assert chart.x_label == "Month"
        assert chart.insight == "Upward trend"
        assert chart.data_error is None

    def test_malformed_data_is_kept_with_error(self) -> None:
        payload = chart_payload("c1", labels=["a", "b"], data=[1])
        chart = ChartConfig.from_api(payload)
        assert chart.chart_data is None
        assert "1 values for 2 labels" in (chart.data_error or "")

    def test_bad_border_width_is_kept_with_error(self) -> None:
        payload = chart_payload("c1")
        payload["chartData"]["datasets"][0]["borderWidth"] = "thick"
        chart = ChartConfig.from_api(payload)
        assert chart.chart_data is None
        assert "border width" in (chart.data_error or "")

    def test_fallback_id(self) -> None:
        payload = chart_payload()
        del payload["_id"]
        assert ChartConfig.from_api(payload, fallback_id="r1-0").id == "r1-0"

    def test_missing_id_rejected(self) -> None:
        payload = chart_payload()
        del payload["_id"]
        with pytest.raises(ChartDataError):
            ChartConfig.from_api(payload)

    def test_blank_insight_ignored(self) -> None:
        assert ChartConfig.from_api(chart_payload(insights="  ")).insight is None

    def test_unknown_type_is_unresolved(self) -> None:
        assert ChartConfig.from_api(chart_payload(chart_type="scatter3d")).resolved_type is None


def test_chart_type_parse() -> None:
    assert ChartType.parse("Pie") is ChartType.PIE
    assert ChartType.parse("scatter3d") is None
    assert ChartType.parse("") is None
    assert ChartType.DOUGHNUT.is_radial
    assert not ChartType.BAR.is_radial


def test_report_from_api() -> None:
    report = Report.from_api(
        {"_id": "r1", "originalName": "sales.xlsx", "createdAt": "2024-05-01T10:00:00Z"}
    )
    assert report.display_name == "sales.xlsx"
    assert report.created_at is not None and report.created_at.year == 2024
    assert report.chart_configs == []
    assert report.with_charts([]).id == "r1"


class TestInsightRequest:
    """Insight payload built from a chart's first dataset."""

    def test_for_chart_uses_fallbacks(self) -> None:
        payload = chart_payload(chart_type="bar")
        payload["chartData"]["datasets"][0]["label"] = ""
        request = InsightRequest.for_chart(ChartConfig.from_api(payload))
        assert request.x_label == "X"
        assert request.y_label == "Y"
        assert request.label == "Dataset"

    def test_to_api(self, bar_chart: ChartConfig) -> None:
        body = InsightRequest.for_chart(bar_chart).to_api()
        assert body == {
            "config": {
                "labels": ["Jan", "Feb", "Mar"],
                "data": [10.0, 20.0, 5.0],
                "xLabel": "Month",
                "yLabel": "Revenue",
                "label": "Revenue",
            },
            "chartType": "bar",
        }

    def test_chart_without_data_rejected(self) -> None:
        chart = ChartConfig(id="c1", chart_type="bar", chart_data=None)
        with pytest.raises(ChartDataError):
            InsightRequest.for_chart(chart)


def test_upload_default_axes() -> None:
    upload = UploadDetail.from_api(
        {
            "_id": "u1",
            "originalName": "data.csv",
            "columns": [{"name": "Month", "type": "string"}, {"name": "Sales", "type": "number"}],
        }
    )
    assert upload.default_axes() == ("Month", "Sales")
    assert UploadDetail.from_api({"_id": "u2", "columns": [{"name": "Only"}]}).default_axes() is None
