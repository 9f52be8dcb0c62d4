"""Reply models, query builders and endpoint wrappers for the Bybit REST API."""

__version__ = "0.1.0"