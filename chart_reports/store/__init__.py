from .report_store import ReportStore, parse_chart_configs

__all__ = ["ReportStore", "parse_chart_configs"]
