"""Forecast ingestion: remote model runs to time series stores"""

__version__ = "0.1.0"
