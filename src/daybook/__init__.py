"""Daybook: temporal cache and aggregation engine for a personal log client."""

__version__ = "0.1.0"
