"""Trade execution safety gate for workflow trading nodes."""

__version__ = "0.1.0"
