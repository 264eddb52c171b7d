"""
Chart Extraction Exceptions

Custom exceptions for the chart extraction pipeline.
"""


class ChartExtractionError(Exception):
    """Base exception for chart extraction errors."""

    def __init__(self, message: str, chart_type: str = None):
        super().__init__(message)
        self.chart_type = chart_type


class MalformedCandidateError(ChartExtractionError):
    """Raised when a candidate block cannot be parsed as JSON."""

    def __init__(self, reason: str, source: str = None):
        super().__init__(f"Malformed chart candidate: {reason}")
        self.reason = reason
        self.source = source


class InvalidChartSpecError(ChartExtractionError):
    """Raised when a parsed candidate is not a usable chart descriptor."""

    def __init__(self, reason: str, chart_type: str = None):
        super().__init__(f"Invalid chart spec: {reason}", chart_type=chart_type)
        self.reason = reason
