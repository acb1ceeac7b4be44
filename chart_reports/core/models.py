from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .enums import ChartType, InsightStatus
from .errors import ChartDataError

Color = str | list[str]


def coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ChartDataError(f"Chart value must be numeric, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ChartDataError(f"Chart value must be numeric, got {value!r}")


def _border_width(raw: Any) -> int:
    if raw is None or raw == "":
        return 1
    try:
        return int(coerce_number(raw))
    except (ChartDataError, OverflowError, ValueError):
        raise ChartDataError(f"Dataset border width must be numeric, got {raw!r}") from None


def _parse_datetime(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class Dataset:
    label: str
    data: list[float]
    background_color: Color | None = None
    border_color: Color | None = None
    border_width: int = 1

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Dataset:
        raw_data = payload.get("data")
        if not isinstance(raw_data, list):
            raise ChartDataError("Dataset is missing its data sequence")
        return cls(
            label=str(payload.get("label") or ""),
            data=[coerce_number(v) for v in raw_data],
            background_color=payload.get("backgroundColor"),
            border_color=payload.get("borderColor"),
            border_width=_border_width(payload.get("borderWidth")),
        )

    def to_api(self) -> dict[str, Any]:
        out: dict[str, Any] = {"label": self.label, "data": list(self.data)}
        if self.background_color is not None:
            out["backgroundColor"] = self.background_color
        if self.border_color is not None:
            out["borderColor"] = self.border_color
        out["borderWidth"] = self.border_width
        return out


@dataclass
class ChartData:
    """Renderer-neutral chart data: category labels plus one or more series.

    Every dataset carries exactly one value per label; construction through
    ``from_api`` or ``validate`` enforces it.
    """

    labels: list[str]
    datasets: list[Dataset]

    def validate(self) -> ChartData:
        if not self.datasets:
            raise ChartDataError("Chart data has no datasets")
        for ds in self.datasets:
            if len(ds.data) != len(self.labels):
                raise ChartDataError(
                    f"Dataset {ds.label!r} has {len(ds.data)} values for {len(self.labels)} labels"
                )
        return self

    @classmethod
    def from_api(cls, payload: Any) -> ChartData:
        if not isinstance(payload, dict):
            raise ChartDataError("Chart data is missing")
        labels = payload.get("labels")
        datasets = payload.get("datasets")
        if not isinstance(labels, list) or not isinstance(datasets, list):
            raise ChartDataError("Chart data is missing labels or datasets")
        return cls(
            labels=[str(label) for label in labels],
            datasets=[Dataset.from_api(ds) for ds in datasets if isinstance(ds, dict)],
        ).validate()

    def to_api(self) -> dict[str, Any]:
        return {"labels": list(self.labels), "datasets": [ds.to_api() for ds in self.datasets]}

    @property
    def primary(self) -> Dataset:
        return self.datasets[0]


@dataclass
class ChartConfig:
    id: str
    chart_type: str
    chart_data: ChartData | None
    x_label: str | None = None
    y_label: str | None = None
    insight: str | None = None
    title: str | None = None
    data_error: str | None = None

    @property
    def resolved_type(self) -> ChartType | None:
        return ChartType.parse(self.chart_type)

    @classmethod
    def from_api(cls, payload: dict[str, Any], fallback_id: str | None = None) -> ChartConfig:
        """Parse a stored chart config.

        Malformed chart data does not raise: ``chart_data`` is left empty and
        ``data_error`` explains why, so the chart can still be listed.
        """
        chart_id = payload.get("_id") or payload.get("id") or fallback_id
        if not chart_id:
            raise ChartDataError("Chart config has no id")

        chart_data: ChartData | None = None
        data_error: str | None = None
        try:
            chart_data = ChartData.from_api(payload.get("chartData"))
        except ChartDataError as e:
            data_error = str(e)

        raw_insight = payload.get("insights") or payload.get("insight")
        return cls(
            id=str(chart_id),
            chart_type=str(payload.get("chartType") or ""),
            chart_data=chart_data,
            x_label=payload.get("xLabel"),
            y_label=payload.get("yLabel"),
            insight=raw_insight if isinstance(raw_insight, str) and raw_insight.strip() else None,
            title=payload.get("title"),
            data_error=data_error,
        )


@dataclass
class Report:
    id: str
    display_name: str
    created_at: datetime | None
    chart_configs: list[ChartConfig] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Report:
        report_id = payload.get("_id") or payload.get("id")
        if not report_id:
            raise ChartDataError("Report has no id")
        return cls(
            id=str(report_id),
            display_name=str(payload.get("originalName") or payload.get("displayName") or report_id),
            created_at=_parse_datetime(payload.get("createdAt")),
        )

    def with_charts(self, chart_configs: list[ChartConfig]) -> Report:
        return replace(self, chart_configs=list(chart_configs))


@dataclass
class InsightCacheEntry:
    status: InsightStatus = InsightStatus.IDLE
    text: str | None = None


@dataclass(frozen=True)
class InsightRequest:
    labels: list[str]
    data: list[float]
    x_label: str
    y_label: str
    label: str
    chart_type: str

    @classmethod
    def for_chart(cls, chart: ChartConfig) -> InsightRequest:
        if chart.chart_data is None or not chart.chart_data.datasets:
            raise ChartDataError(chart.data_error or "Chart data is missing or invalid.")
        primary = chart.chart_data.primary
        return cls(
            labels=list(chart.chart_data.labels),
            data=list(primary.data),
            x_label=chart.x_label or "X",
            y_label=chart.y_label or "Y",
            label=primary.label or "Dataset",
            chart_type=chart.chart_type,
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "config": {
                "labels": self.labels,
                "data": self.data,
                "xLabel": self.x_label,
                "yLabel": self.y_label,
                "label": self.label,
            },
            "chartType": self.chart_type,
        }


@dataclass(frozen=True)
class UploadColumn:
    name: str
    type: str | None = None


@dataclass
class UploadDetail:
    id: str
    original_name: str
    columns: list[UploadColumn]

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> UploadDetail:
        columns = [
            UploadColumn(name=str(c.get("name")), type=c.get("type"))
            for c in payload.get("columns") or []
            if isinstance(c, dict) and c.get("name")
        ]
        upload_id = payload.get("_id") or payload.get("id") or ""
        return cls(
            id=str(upload_id),
            original_name=str(payload.get("originalName") or upload_id),
            columns=columns,
        )

    def default_axes(self) -> tuple[str, str] | None:
        if len(self.columns) < 2:
            return None
        return self.columns[0].name, self.columns[1].name
