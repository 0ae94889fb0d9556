"""
Time Series Store

Zarr-based storage for time-oriented forecast data. Time is indexed by
absolute slot (seconds since epoch / time step). Each variable is split into
partitions of `n_time_per_file` slots; slot `s` lives in partition
`s // n_time_per_file`. Every run overwrites the slots it covers and keeps
all others, so older forecasts are progressively replaced by newer ones.

Values are quantized to int16 with a per-variable scale factor.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np
import xarray as xr

from ..errors import StoreWriteFailure
from .config import StorageConfig, get_storage_config

logger = logging.getLogger(__name__)

INT16_FILL_VALUE = -32768
INT16_MAX = 32767


@dataclass(frozen=True)
class RingTimeRange:
    """Half-open range [start, end) of absolute time slots"""
    start: int
    end: int

    @classmethod
    def from_run(cls, run: datetime, dt_seconds: int, n_time: int) -> 'RingTimeRange':
        start = int(run.timestamp()) // dt_seconds
        return cls(start, start + n_time)

    def __len__(self) -> int:
        return self.end - self.start


def _quantized_encoding(chunks: Tuple[int, ...], scale_factor: float) -> Dict:
    """Zarr encoding storing round(value * scale_factor) as int16"""
    return {
        'dtype': 'int16',
        'scale_factor': 1.0 / scale_factor,
        '_FillValue': INT16_FILL_VALUE,
        'chunks': chunks,
    }


def _clip_to_int16(data: np.ndarray, scale_factor: float) -> np.ndarray:
    """Clip values so they fit int16 after quantization. NaN is kept."""
    limit = INT16_MAX / scale_factor
    return np.clip(data, -limit, limit)


class TimeSeriesStore:
    """Time partitioned store for one domain"""

    def __init__(
        self,
        base_path: Union[str, Path],
        n_locations: int,
        n_time_per_file: int,
        config: Optional[StorageConfig] = None
    ):
        """
        Initialize the store.

        Args:
            base_path: Directory holding one Zarr store per variable partition
            n_locations: Number of grid cells (nx * ny)
            n_time_per_file: Time slots per partition
            config: Storage configuration (uses global if not provided)
        """
        self.config = config or get_storage_config()
        self.base_path = Path(base_path)
        self.n_locations = n_locations
        self.n_time_per_file = n_time_per_file

    @staticmethod
    def exists(path: Union[str, Path]) -> bool:
        """Check if a Zarr store exists"""
        path = Path(path)
        # Check for both zarr v2 (.zattrs) and v3 (zarr.json) formats
        return path.exists() and (
            (path / '.zattrs').exists() or (path / 'zarr.json').exists()
        )

    def partition_path(self, variable: str, index: int) -> Path:
        """Path of the partition holding slots [index * n_time_per_file, (index + 1) * n_time_per_file)"""
        return self.base_path / f"{variable}_{index}.zarr"

    # -------------------------------------------------------------------------
    # Static grids
    # -------------------------------------------------------------------------

    def write_static(
        self,
        path: Union[str, Path],
        data: np.ndarray,
        chunks: Tuple[int, int],
        scale_factor: float = 1.0
    ):
        """
        Write a non time varying (ny, nx) grid.

        Args:
            path: Zarr store path
            data: 2D array
            chunks: Chunk shape
            scale_factor: Quantization factor
        """
        ds = xr.Dataset(data_vars={'data': (['y', 'x'], _clip_to_int16(data, scale_factor))})
        chunks = tuple(min(c, n) for c, n in zip(chunks, data.shape))
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            ds.to_zarr(path, mode='w', encoding={'data': _quantized_encoding(chunks, scale_factor)})
        except (OSError, ValueError) as e:
            raise StoreWriteFailure(f"Could not write {path}: {e}") from e
        logger.info(f"Created static grid at {path}")

    def read_static(self, path: Union[str, Path]) -> np.ndarray:
        """Read a static grid written by write_static"""
        if not self.exists(path):
            raise FileNotFoundError(f"Store not found: {path}")
        with xr.open_zarr(path, chunks=None) as ds:
            return ds['data'].values.astype(np.float32)

    # -------------------------------------------------------------------------
    # Time series
    # -------------------------------------------------------------------------

    def update_from_time_oriented(
        self,
        variable: str,
        data: np.ndarray,
        ring: RingTimeRange,
        skip_first: int = 0,
        skip_last: int = 0,
        smooth: int = 0,
        scale_factor: float = 1.0
    ):
        """
        Write a fast-time array into the partitions covered by a time range.

        Args:
            variable: Variable (file) name
            data: Array with shape (n_locations, len(ring))
            ring: Absolute time slots of the columns of `data`
            skip_first: Leading slots not to write
            skip_last: Trailing slots not to write
            smooth: Blend the first `smooth` written slots with existing data
            scale_factor: Quantization factor
        """
        if data.shape != (self.n_locations, len(ring)):
            raise StoreWriteFailure(
                f"Data shape {data.shape} does not match ({self.n_locations}, {len(ring)})"
            )

        first = ring.start + skip_first
        last = ring.end - skip_last
        if first >= last:
            logger.warning(f"Nothing to write for {variable}")
            return

        n = self.n_time_per_file
        for index in range(first // n, (last - 1) // n + 1):
            file_start = index * n
            lo = max(first, file_start)
            hi = min(last, file_start + n)

            values = self._read_partition(variable, index)
            target = values[:, lo - file_start:hi - file_start]
            new = data[:, lo - ring.start:hi - ring.start].astype(np.float32)

            if smooth > 0:
                offset = np.arange(lo, hi) - first
                blend = offset < smooth
                if blend.any():
                    weight = ((offset[blend] + 1) / (smooth + 1)).astype(np.float32)
                    old = target[:, blend]
                    mixed = old * (1 - weight) + new[:, blend] * weight
                    new[:, blend] = np.where(np.isnan(old), new[:, blend], mixed)

            values[:, lo - file_start:hi - file_start] = new
            self._write_partition(variable, index, values, scale_factor)
            logger.debug(f"Updated {variable} partition {index} slots {lo}-{hi}")

    def read(
        self,
        variable: str,
        ring: RingTimeRange,
        locations: Optional[slice] = None
    ) -> np.ndarray:
        """
        Read a time range for all or some locations.

        Returns:
            Array with shape (n_selected_locations, len(ring)), NaN where nothing was written
        """
        locations = locations or slice(None)
        n_selected = len(range(self.n_locations)[locations])
        out = np.full((n_selected, len(ring)), np.nan, dtype=np.float32)

        n = self.n_time_per_file
        for index in range(ring.start // n, (ring.end - 1) // n + 1):
            path = self.partition_path(variable, index)
            if not self.exists(path):
                continue
            file_start = index * n
            lo = max(ring.start, file_start)
            hi = min(ring.end, file_start + n)
            with xr.open_zarr(path, chunks=None) as ds:
                block = ds['data'].isel(location=locations, time=slice(lo - file_start, hi - file_start))
                out[:, lo - ring.start:hi - ring.start] = block.values
        return out

    def _read_partition(self, variable: str, index: int) -> np.ndarray:
        """Load a partition into memory, NaN filled if it does not exist yet"""
        path = self.partition_path(variable, index)
        if not self.exists(path):
            return np.full((self.n_locations, self.n_time_per_file), np.nan, dtype=np.float32)
        with xr.open_zarr(path, chunks=None) as ds:
            return ds['data'].values.astype(np.float32)

    def _write_partition(self, variable: str, index: int, values: np.ndarray, scale_factor: float):
        path = self.partition_path(variable, index)
        file_start = index * self.n_time_per_file
        ds = xr.Dataset(
            data_vars={'data': (['location', 'time'], _clip_to_int16(values, scale_factor))},
            coords={'time': np.arange(file_start, file_start + self.n_time_per_file, dtype=np.int64)},
            attrs={
                'variable': variable,
                'updated_at': datetime.now(timezone.utc).isoformat(),
            }
        )
        chunks = (min(self.n_locations, self.config.location_chunk_size), self.n_time_per_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            ds.to_zarr(path, mode='w', encoding={'data': _quantized_encoding(chunks, scale_factor)})
        except (OSError, ValueError) as e:
            raise StoreWriteFailure(f"Could not write {path}: {e}") from e
