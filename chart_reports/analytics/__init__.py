from .workbench import ChartWorkbench

__all__ = ["ChartWorkbench"]
