"""Cross-exchange funding rate aggregation and spread matrix."""

__version__ = "0.1.0"
