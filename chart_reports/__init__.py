"""ChartReports: report browsing, chart rendering and export toolkit."""

__version__ = "0.1.0"
