"""Browser-based editor for structured CV documents stored as JSON."""

__version__ = "0.1.0"
