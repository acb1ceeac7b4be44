from __future__ import annotations

from enum import Enum


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    RADAR = "radar"
    # Render-only variant used by the chart workbench
    BAR_3D = "bar3d"

    @classmethod
    def parse(cls, tag: str | None) -> ChartType | None:
        """Case-insensitive lookup; None when the tag is not a known type."""
        if not tag:
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None

    @property
    def is_radial(self) -> bool:
        """Pie and doughnut charts carry no cartesian axes."""
        return self in (ChartType.PIE, ChartType.DOUGHNUT)


class InsightStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ExportFormat(str, Enum):
    PNG = "png"
    PDF = "pdf"


class NotificationLevel(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
