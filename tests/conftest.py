"""Shared fixtures for ChartReports tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from chart_reports.core.config import Settings
from chart_reports.core.models import ChartConfig


def chart_payload(
    chart_id: str = "c1",
    chart_type: str = "bar",
    labels: list[str] | None = None,
    data: list[float] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    labels = labels if labels is not None else ["Jan", "Feb", "Mar"]
    data = data if data is not None else [10, 20, 5]
    payload: dict[str, Any] = {
        "_id": chart_id,
        "chartType": chart_type,
        "chartData": {
            "labels": labels,
            "datasets": [{"label": "Revenue", "data": data}],
        },
    }
    payload.update(extra)
    return payload


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_base_url="http://reports.test/api",
        api_token=None,
        request_timeout=5.0,
        settle_delay_seconds=0.0,
        export_dir=tmp_path / "exports",
        anthropic_api_key=None,
    )


@pytest.fixture
def bar_chart() -> ChartConfig:
    return ChartConfig.from_api(chart_payload("c1", "bar", xLabel="Month", yLabel="Revenue"))


@pytest.fixture
def reports_client() -> MagicMock:
    """Reports backend double with two reports of one chart each."""
    client = MagicMock()
    client.list_reports = AsyncMock(
        return_value=[
            {"_id": "r1", "originalName": "sales.xlsx", "createdAt": "2024-05-01T10:00:00Z"},
            {"_id": "r2", "originalName": "costs.xlsx", "createdAt": "2024-05-02T10:00:00Z"},
        ]
    )

    async def get_chart_configs(report_id: str) -> list[dict[str, Any]]:
        if report_id == "r1":
            return [chart_payload("c1", "bar", xLabel="Month", yLabel="Revenue")]
        return [chart_payload("c2", "pie", labels=["A", "B"], data=[3, 7])]

    client.get_chart_configs = AsyncMock(side_effect=get_chart_configs)
    client.generate_insight = AsyncMock(return_value="Revenue peaked in February.")
    return client
