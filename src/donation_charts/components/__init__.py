"""Qt widgets hosting the chart engine."""

from .chart_widget import ChartWidget  # noqa: F401
