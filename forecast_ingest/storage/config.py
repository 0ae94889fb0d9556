"""
Storage Configuration

Defines where downloads, time series stores and static grids are written.
Paths can be redirected with environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class StorageConfig:
    """Configuration for data storage backend"""

    # Base path
    base_path: Path = field(default_factory=lambda: Path(__file__).parent.parent.parent / 'zarr')

    # Directories (relative to base_path), one subdirectory per domain
    download_dir: str = 'download'
    store_dir: str = 'timeseries'

    # Static grids
    elevation_store: str = 'HSURF.zarr'

    # Chunking configuration for time partitioned stores
    location_chunk_size: int = 4096  # Locations per chunk

    def __post_init__(self):
        """Ensure paths are Path objects"""
        if isinstance(self.base_path, str):
            self.base_path = Path(self.base_path)

    def get_download_directory(self, domain: str) -> Path:
        """Get directory for raw downloads and diagnostic exports of a domain"""
        return self.base_path / self.download_dir / domain

    def get_store_directory(self, domain: str) -> Path:
        """Get directory for the time series stores of a domain"""
        return self.base_path / self.store_dir / domain

    def get_elevation_store_path(self, domain: str) -> Path:
        """Get path to the static elevation mask of a domain"""
        return self.get_store_directory(domain) / self.elevation_store

    def ensure_directories(self, domain: str):
        """Create necessary directories for a domain"""
        self.get_download_directory(domain).mkdir(parents=True, exist_ok=True)
        self.get_store_directory(domain).mkdir(parents=True, exist_ok=True)


# Global config instance (can be overridden)
_config: Optional[StorageConfig] = None


def get_storage_config() -> StorageConfig:
    """Get the current storage configuration"""
    global _config
    if _config is None:
        _config = StorageConfig()
        # Check for environment variable overrides
        if os.environ.get('METNO_DATA_PATH'):
            _config.base_path = Path(os.environ['METNO_DATA_PATH'])
        if os.environ.get('METNO_LOCATION_CHUNK_SIZE'):
            _config.location_chunk_size = int(os.environ['METNO_LOCATION_CHUNK_SIZE'])
    return _config


def set_storage_config(config: StorageConfig):
    """Set a custom storage configuration"""
    global _config
    _config = config
