"""
Renewable Usage Report.

Loads a household renewable-energy-usage dataset and produces the descriptive
chart set: savings by source, usage trend by year, usage by household size,
confidence intervals by household size and a country usage map.
"""

from .errors import (
    ReportError,
    LoadError,
    AggregationError,
    GeoResolutionError,
    RenderError,
)

__version__ = "0.1.0"

__all__ = [
    'ReportError',
    'LoadError',
    'AggregationError',
    'GeoResolutionError',
    'RenderError',
    '__version__',
]
