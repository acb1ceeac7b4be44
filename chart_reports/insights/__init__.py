"""Chart insight package.

Insights are short narrative paragraphs describing one chart's primary series.
They are requested on demand, cached per chart id for the life of a view and
shown under the chart once ready.

Main Components:
    - InsightController: per-chart idle/loading/ready/error state machine and cache
    - InsightsGenerator: Claude-powered alternative to the reports service endpoint

Usage:
    from chart_reports.insights import InsightController

    controller = InsightController(source=api_client, notifier=notifier)
    await controller.generate(chart)
    if not controller.control_visible(chart.id):
        print(controller.text(chart.id))

Architecture Notes:
    - Any object with ``async generate_insight(InsightRequest) -> str`` is a valid source
    - Duplicate triggers while loading or ready are no-ops
    - Failures become error notifications and never propagate
"""

from .controller import InsightController
from .generator import InsightsGenerator

__all__ = ["InsightController", "InsightsGenerator"]
