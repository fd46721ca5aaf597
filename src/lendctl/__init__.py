"""lendctl — library loan and reservation lifecycle engine."""

__version__ = "0.1.0"
