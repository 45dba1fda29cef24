"""
Exception hierarchy for the renewable usage report.

Load failures abort a run. The remaining errors are raised per row or per
chart and are caught by the report pipeline so other charts still render.
"""


class ReportError(Exception):
    """Base class for report errors."""
    pass


class LoadError(ReportError):
    """Raised when the usage table or coordinate reference cannot be loaded."""
    pass


class AggregationError(ReportError):
    """Raised when a reduction is undefined for a group."""
    pass


class GeoResolutionError(ReportError):
    """Raised when a country has no entry in the coordinate reference."""
    pass


class RenderError(ReportError):
    """Raised when a chart cannot be drawn from the given rows and spec."""
    pass
