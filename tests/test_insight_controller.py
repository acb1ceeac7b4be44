"""Tests for the per-chart insight state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import chart_payload

from chart_reports.core.enums import InsightStatus, NotificationLevel
from chart_reports.core.errors import FetchError
from chart_reports.core.models import ChartConfig, InsightRequest
from chart_reports.core.notifications import Notifier
from chart_reports.insights.controller import EMPTY_INSIGHT, InsightController


class GatedSource:
    """Insight source that blocks until released, counting calls."""

    def __init__(self, text: str = "Sales rose.") -> None:
        self.text = text
        self.calls: list[InsightRequest] = []
        self.release = asyncio.Event()

    async def generate_insight(self, request: InsightRequest) -> str:
        self.calls.append(request)
        await self.release.wait()
        return self.text


class TestInsightLifecycle:
    """idle -> loading -> ready, and error -> retry."""

    @pytest.mark.asyncio
    async def test_success(self, bar_chart: ChartConfig) -> None:
        source = AsyncMock()
        source.generate_insight.return_value = "Revenue peaked in February."
        notifier = Notifier()
        controller = InsightController(source, notifier)

        assert controller.status(bar_chart.id) is InsightStatus.IDLE
        assert controller.control_visible(bar_chart.id)

        entry = await controller.generate(bar_chart)

        assert entry.status is InsightStatus.READY
        assert entry.text == "Revenue peaked in February."
        assert not controller.control_visible(bar_chart.id)
        request = source.generate_insight.call_args[0][0]
        assert request.to_api()["config"]["label"] == "Revenue"
        assert notifier.active["insight-c1"].level is NotificationLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_duplicate_trigger_while_loading_is_noop(self, bar_chart: ChartConfig) -> None:
        source = GatedSource()
        controller = InsightController(source)

        first = asyncio.create_task(controller.generate(bar_chart))
        await asyncio.sleep(0)
        assert controller.status(bar_chart.id) is InsightStatus.LOADING

        await controller.generate(bar_chart)
        assert len(source.calls) == 1

        source.release.set()
        await first
        assert controller.status(bar_chart.id) is InsightStatus.READY
        assert len(source.calls) == 1

    @pytest.mark.asyncio
    async def test_cancelled_request_can_be_retried(self, bar_chart: ChartConfig) -> None:
        source = GatedSource()
        controller = InsightController(source)

        task = asyncio.create_task(controller.generate(bar_chart))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert controller.status(bar_chart.id) is InsightStatus.ERROR
        assert controller.control_visible(bar_chart.id)

        source.release.set()
        entry = await controller.generate(bar_chart)
        assert entry.status is InsightStatus.READY
        assert len(source.calls) == 2

    @pytest.mark.asyncio
    async def test_ready_entry_is_not_regenerated(self, bar_chart: ChartConfig) -> None:
        source = AsyncMock()
        source.generate_insight.return_value = "First."
        controller = InsightController(source)

        await controller.generate(bar_chart)
        source.generate_insight.return_value = "Second."
        await controller.generate(bar_chart)

        assert controller.text(bar_chart.id) == "First."
        source.generate_insight.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_then_retry(self, bar_chart: ChartConfig) -> None:
        source = AsyncMock()
        source.generate_insight.side_effect = [FetchError("POST failed", status_code=500), "Recovered."]
        notifier = Notifier()
        controller = InsightController(source, notifier)

        entry = await controller.generate(bar_chart)
        assert entry.status is InsightStatus.ERROR
        assert controller.control_visible(bar_chart.id)
        error = notifier.active["insight-c1"]
        assert error.level is NotificationLevel.ERROR
        assert error.message == "Failed to generate insight. Please try again."

        entry = await controller.generate(bar_chart)
        assert entry.status is InsightStatus.READY
        assert entry.text == "Recovered."

    @pytest.mark.asyncio
    async def test_empty_response(self, bar_chart: ChartConfig) -> None:
        source = AsyncMock()
        source.generate_insight.return_value = "   "
        controller = InsightController(source)
        entry = await controller.generate(bar_chart)
        assert entry.status is InsightStatus.READY
        assert entry.text == EMPTY_INSIGHT == "No insight generated."

    @pytest.mark.asyncio
    async def test_chart_without_data(self) -> None:
        chart = ChartConfig.from_api(chart_payload(labels=["a", "b"], data=[1]))
        source = AsyncMock()
        notifier = Notifier()
        controller = InsightController(source, notifier)

        entry = await controller.generate(chart)

        assert entry.status is InsightStatus.ERROR
        source.generate_insight.assert_not_awaited()
        assert notifier.errors()


@pytest.mark.asyncio
async def test_different_charts_run_concurrently() -> None:
    source = GatedSource()
    controller = InsightController(source)
    c1 = ChartConfig.from_api(chart_payload("c1"))
    c2 = ChartConfig.from_api(chart_payload("c2"))

    tasks = [asyncio.create_task(controller.generate(c)) for c in (c1, c2)]
    await asyncio.sleep(0)
    assert controller.status("c1") is InsightStatus.LOADING
    assert controller.status("c2") is InsightStatus.LOADING
    assert len(source.calls) == 2

    source.release.set()
    await asyncio.gather(*tasks)
    assert controller.status("c1") is InsightStatus.READY
    assert controller.status("c2") is InsightStatus.READY


def test_seed_does_not_overwrite() -> None:
    controller = InsightController(AsyncMock())
    controller.seed("c1", "Stored insight.")
    controller.seed("c1", "Other insight.")
    controller.seed("c2", "")

    assert controller.text("c1") == "Stored insight."
    assert not controller.control_visible("c1")
    assert not controller.has_entry("c2")
