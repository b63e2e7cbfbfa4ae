"""Product category classifier for the retail catalog."""

__version__ = "0.1.0"
