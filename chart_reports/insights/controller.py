"""Per-chart insight request/cache state machine.

Each chart id moves through ``idle -> loading -> ready`` or
``loading -> error -> loading`` (retry). Only ``generate`` moves an entry into
``loading``, and it does nothing while the entry is already loading or ready.
The entry is switched to ``loading`` before the first await, so two triggers
for the same chart on one event loop can never both reach the collaborator.
Different chart ids are independent and may be in flight together.

A ``ready`` insight is sticky: it is tied to the chart id and is not
invalidated when the chart's data is regenerated.

A cancelled request leaves the entry in ``error`` so it can be retried.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from ..core.enums import InsightStatus
from ..core.errors import ChartDataError, ChartReportsError, InsightGenerationError
from ..core.logging_config import get_logger
from ..core.models import ChartConfig, InsightCacheEntry, InsightRequest
from ..core.notifications import Notifier

logger = get_logger(__name__)

EMPTY_INSIGHT = "No insight generated."


class InsightSource(Protocol):
    async def generate_insight(self, request: InsightRequest) -> str: ...


class InsightController:
    """Owns the insight cache, keyed by chart id."""

    def __init__(self, source: InsightSource, notifier: Notifier | None = None) -> None:
        self.source = source
        self.notifier = notifier or Notifier()
        self._entries: dict[str, InsightCacheEntry] = {}

    def entry(self, chart_id: str) -> InsightCacheEntry:
        """Current entry for a chart; unknown ids read as idle without creating one."""
        return self._entries.get(chart_id) or InsightCacheEntry()

    def status(self, chart_id: str) -> InsightStatus:
        return self.entry(chart_id).status

    def text(self, chart_id: str) -> str | None:
        return self.entry(chart_id).text

    def has_entry(self, chart_id: str) -> bool:
        return chart_id in self._entries

    def control_visible(self, chart_id: str) -> bool:
        """Whether the "Generate Insight" control is shown for this chart."""
        return self.status(chart_id) is not InsightStatus.READY

    def seed(self, chart_id: str, text: str) -> None:
        """Record an insight stored server-side, unless one is already cached."""
        if chart_id in self._entries or not text:
            return
        self._entries[chart_id] = InsightCacheEntry(status=InsightStatus.READY, text=text)

    async def generate(self, chart: ChartConfig) -> InsightCacheEntry:
        """Request an insight for ``chart`` and cache the outcome.

        Failures never propagate: the entry moves to ``error`` and an error
        notification is raised, leaving the control available for a retry.
        """
        key = f"insight-{chart.id}"
        entry = self._entries.setdefault(chart.id, InsightCacheEntry())
        if entry.status is InsightStatus.LOADING:
            logger.debug("Insight already loading, ignoring trigger", extra={"chart_id": chart.id})
            return entry
        if entry.status is InsightStatus.READY:
            return entry

        entry.status = InsightStatus.LOADING
        self.notifier.loading("Generating insight...", key)

        try:
            request = InsightRequest.for_chart(chart)
            text = await self.source.generate_insight(request)
        except asyncio.CancelledError:
            entry.status = InsightStatus.ERROR
            logger.info("Insight request cancelled", extra={"chart_id": chart.id})
            raise
        except ChartDataError as e:
            entry.status = InsightStatus.ERROR
            self.notifier.notify_failure(e, "Failed to generate insight", key)
            return entry
        except ChartReportsError as e:
            entry.status = InsightStatus.ERROR
            self.notifier.notify_failure(
                InsightGenerationError(str(e)), "Failed to generate insight", key
            )
            return entry
        except Exception as e:
            entry.status = InsightStatus.ERROR
            self.notifier.notify_failure(e, "Failed to generate insight", key)
            return entry

        entry.text = text.strip() if text and text.strip() else EMPTY_INSIGHT
        entry.status = InsightStatus.READY
        logger.info(
            "Insight generated", extra={"chart_id": chart.id, "length": len(entry.text)}
        )
        self.notifier.success("Insight generated!", key)
        return entry
