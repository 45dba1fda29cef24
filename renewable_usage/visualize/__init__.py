"""
Visualization package for the renewable usage report.

Chart specifications and the renderer that turns aggregate rows into
static images and the interactive country map.
"""

from .chart_spec import ChartSpec, DEFAULT_CHART_SPECS, build_chart_specs
from .usage_visualizer import UsageVisualizer

__all__ = [
    'ChartSpec',
    'DEFAULT_CHART_SPECS',
    'build_chart_specs',
    'UsageVisualizer'
]
