from .expansion import ExpansionState
from .session import ReportsView

__all__ = ["ExpansionState", "ReportsView"]
