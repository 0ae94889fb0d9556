"""
Data Storage Module

Zarr-based time series storage for gridded forecast data.
"""

from .config import StorageConfig, get_storage_config, set_storage_config
from .timeseries import TimeSeriesStore, RingTimeRange

__all__ = [
    # Config
    'StorageConfig',
    'get_storage_config',
    'set_storage_config',
    # Stores
    'TimeSeriesStore',
    'RingTimeRange',
]
