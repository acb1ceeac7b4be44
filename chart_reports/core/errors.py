"""Exception hierarchy for ChartReports."""

from __future__ import annotations


class ChartReportsError(Exception):
    """Base exception for ChartReports errors."""

    pass


class ConfigurationError(ChartReportsError):
    """Settings could not be parsed."""

    pass


class FetchError(ChartReportsError):
    """A collaborator REST call failed (transport, status or body)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(ChartReportsError):
    """User input validation failed."""

    pass


class ChartDataError(ChartReportsError):
    """Chart data is missing, malformed or violates the label/data invariant."""

    pass


class ExportError(ChartReportsError):
    """A PNG/PDF export could not produce its artifact."""

    pass


class InsightGenerationError(ChartReportsError):
    """The insight collaborator failed or returned an unusable response."""

    pass
