from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ExpansionState:
    """Which reports and charts are expanded in one view session.

    A missing key means collapsed. The report and chart maps are independent.
    """

    reports: dict[str, bool] = field(default_factory=dict)
    charts: dict[str, bool] = field(default_factory=dict)

    def toggle_report(self, report_id: str) -> bool:
        self.reports[report_id] = not self.reports.get(report_id, False)
        return self.reports[report_id]

    def toggle_chart(self, chart_id: str) -> bool:
        self.charts[chart_id] = not self.charts.get(chart_id, False)
        return self.charts[chart_id]

    def is_report_expanded(self, report_id: str) -> bool:
        return self.reports.get(report_id, False)

    def is_chart_expanded(self, chart_id: str) -> bool:
        return self.charts.get(chart_id, False)
