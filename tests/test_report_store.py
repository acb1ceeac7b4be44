"""Tests for report loading with chart-config fan-out."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import chart_payload

from chart_reports.core.errors import FetchError
from chart_reports.store.report_store import ReportStore, parse_chart_configs


class TestLoadReports:
    """ReportStore.load_reports aggregation."""

    @pytest.mark.asyncio
    async def test_loads_charts_per_report(self, reports_client: MagicMock) -> None:
        store = ReportStore(reports_client)
        reports = await store.load_reports()

        assert [r.id for r in reports] == ["r1", "r2"]
        assert [c.id for c in reports[0].chart_configs] == ["c1"]
        assert reports[1].chart_configs[0].chart_type == "pie"
        assert store.failed_report_ids == []

    @pytest.mark.asyncio
    async def test_partial_failure_degrades_one_report(self, reports_client: MagicMock) -> None:
        async def get_chart_configs(report_id: str) -> list[dict[str, Any]]:
            if report_id == "r1":
                raise FetchError("GET /chart-analytics/r1 returned 500", status_code=500)
            return [chart_payload("c2")]

        reports_client.get_chart_configs = AsyncMock(side_effect=get_chart_configs)
        store = ReportStore(reports_client)

        reports = await store.load_reports()

        assert [r.id for r in reports] == ["r1", "r2"]
        assert reports[0].chart_configs == []
        assert [c.id for c in reports[1].chart_configs] == ["c2"]
        assert store.failed_report_ids == ["r1"]

    @pytest.mark.asyncio
    async def test_report_list_failure_propagates(self, reports_client: MagicMock) -> None:
        reports_client.list_reports = AsyncMock(side_effect=FetchError("down"))
        with pytest.raises(FetchError):
            await ReportStore(reports_client).load_reports()

    @pytest.mark.asyncio
    async def test_order_preserved_when_fetches_finish_out_of_order(self) -> None:
        client = MagicMock()
        client.list_reports = AsyncMock(
            return_value=[{"_id": "slow"}, {"_id": "fast"}]
        )

        async def get_chart_configs(report_id: str) -> list[dict[str, Any]]:
            await asyncio.sleep(0.05 if report_id == "slow" else 0)
            return [chart_payload(f"{report_id}-chart")]

        client.get_chart_configs = AsyncMock(side_effect=get_chart_configs)
        reports = await ReportStore(client).load_reports()
        assert [r.id for r in reports] == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_malformed_report_skipped(self, reports_client: MagicMock) -> None:
        reports_client.list_reports = AsyncMock(return_value=[{"originalName": "no id"}, {"_id": "r2"}])
        reports = await ReportStore(reports_client).load_reports()
        assert [r.id for r in reports] == ["r2"]


@pytest.mark.asyncio
async def test_malformed_dataset_keeps_sibling_charts(reports_client: MagicMock) -> None:
    bad = chart_payload("bad")
    bad["chartData"]["datasets"][0]["borderWidth"] = "thick"
    reports_client.list_reports = AsyncMock(return_value=[{"_id": "r1"}])
    reports_client.get_chart_configs = AsyncMock(return_value=[chart_payload("good"), bad])
    store = ReportStore(reports_client)

    reports = await store.load_reports()

    charts = reports[0].chart_configs
    assert [c.id for c in charts] == ["good", "bad"]
    assert charts[0].chart_data is not None
    assert charts[1].chart_data is None
    assert charts[1].data_error
    assert store.failed_report_ids == []


def test_parse_chart_configs_assigns_positional_ids() -> None:
    payload = chart_payload()
    del payload["_id"]
    charts = parse_chart_configs("r1", [chart_payload("a"), payload])
    assert [c.id for c in charts] == ["a", "r1-1"]


@pytest.mark.asyncio
async def test_find_chart(reports_client: MagicMock) -> None:
    store = ReportStore(reports_client)
    await store.load_reports()
    found = store.find_chart("c2")
    assert found is not None
    assert found[0].id == "r2"
    assert store.find_chart("missing") is None
