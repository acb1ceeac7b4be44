"""Tests for notification mapping and the error hierarchy."""

from __future__ import annotations

import pytest

from chart_reports.core.enums import NotificationLevel
from chart_reports.core.errors import (
    ChartDataError,
    ChartReportsError,
    ConfigurationError,
    ExportError,
    FetchError,
    InsightGenerationError,
    ValidationError,
)
from chart_reports.core.notifications import Notifier, describe_failure


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ValidationError("Pick both axes"), "Op failed: Pick both axes"),
        (ChartDataError("bad data"), "Op failed: bad data"),
        (ExportError("disk full"), "Op failed: disk full"),
        (InsightGenerationError("429"), "Op failed. Please try again."),
        (FetchError("GET /x returned 500", status_code=500), "Op failed. Service temporarily unavailable."),
        (KeyError("internal"), "Op failed. An unexpected error occurred."),
    ],
)
def test_describe_failure(error: Exception, expected: str) -> None:
    assert describe_failure(error, "Op failed") == expected


def test_error_hierarchy() -> None:
    for cls in (
        FetchError,
        ChartDataError,
        ValidationError,
        ExportError,
        InsightGenerationError,
        ConfigurationError,
    ):
        assert issubclass(cls, ChartReportsError)
    assert FetchError("x", status_code=404).status_code == 404


class TestNotifier:
    """Keyed, mutable notification stream."""

    def test_later_message_replaces_earlier_for_same_key(self) -> None:
        notifier = Notifier()
        notifier.loading("Preparing PNG download...", "png-c1")
        notifier.success("PNG downloaded successfully!", "png-c1")

        assert notifier.active["png-c1"].level is NotificationLevel.SUCCESS
        assert [n.level for n in notifier.history] == [
            NotificationLevel.LOADING,
            NotificationLevel.SUCCESS,
        ]

    def test_sink_receives_notifications(self) -> None:
        received = []
        notifier = Notifier(sink=received.append)
        notifier.info("hello")
        assert received[0].message == "hello"
        assert received[0].key is None

    def test_notify_failure(self) -> None:
        notifier = Notifier()
        notifier.notify_failure(ExportError("boom"), "Failed to download PDF", "pdf-c1")
        assert notifier.errors()[0].message == "Failed to download PDF: boom"

    def test_muted_notifier_drops_everything(self) -> None:
        received = []
        notifier = Notifier(sink=received.append)
        notifier.mute()
        notifier.error("ignored", "k")
        assert received == []
        assert notifier.history == []
        assert notifier.active == {}
