"""
Variable transforms

Forecast files store each variable space-major: all locations of one time
step are contiguous. Time series operations (scaling, deaccumulation, store
updates) work per location, so data is transposed to a fast-time layout
first.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import xarray as xr

from ...errors import MissingArray, SchemaMismatch, TypeMismatch
from .domains import GridDescriptor, VariableSpec
from .reader import RemoteDataset

logger = logging.getLogger(__name__)


@dataclass
class TimeMajorArray:
    """Values of one variable with shape (n_locations, n_time)"""
    data: np.ndarray

    @classmethod
    def from_space_major(cls, data: np.ndarray, n_locations: int, n_time: int) -> 'TimeMajorArray':
        """Transpose (n_time, n_locations) data to a contiguous fast-time array"""
        space_major = data.reshape(n_time, n_locations)
        return cls(np.ascontiguousarray(space_major.T))

    @property
    def n_locations(self) -> int:
        return self.data.shape[0]

    @property
    def n_time(self) -> int:
        return self.data.shape[1]

    def multiply_add(self, multiply: float, add: float):
        """value = value * multiply + add, in place"""
        self.data *= multiply
        self.data += add

    def deaccumulate_over_time(self, skip: int = 0):
        """
        Convert sums since run start to per time step values, in place.

        The first `skip` steps are left untouched. A NaN predecessor leaves
        the value as it is.
        """
        first = max(skip, 1)
        if first >= self.n_time:
            return
        current = self.data[:, first:]
        previous = self.data[:, first - 1:-1]
        deaccumulated = np.where(np.isnan(previous), current, current - previous)
        self.data[:, first:] = deaccumulated

    def transpose(self) -> np.ndarray:
        """Space-major copy with shape (n_time, n_locations)"""
        return np.ascontiguousarray(self.data.T)


def read_float_array(dataset: RemoteDataset, name: str, size: int) -> np.ndarray:
    """
    Read a float array and flatten it.

    Raises:
        MissingArray: Variable does not exist
        TypeMismatch: Variable is not floating point
        SchemaMismatch: Variable does not hold `size` values
    """
    data = dataset.read_array(name)
    if data is None:
        raise MissingArray(f"Could not open variable {name}")
    if data.dtype.kind != 'f':
        raise TypeMismatch(f"Could not get float data from {name}, got {data.dtype}")
    if data.size != size:
        raise SchemaMismatch(f"Variable {name} has {data.size} values, expected {size}")
    return data.astype(np.float32, copy=False).reshape(-1)


def transform_variable(
    dataset: RemoteDataset,
    variable: VariableSpec,
    n_locations: int,
    n_time: int
) -> TimeMajorArray:
    """
    Read a variable and convert it to a fast-time series ready for storage.

    Scaling is applied before deaccumulation.
    """
    raw = read_float_array(dataset, variable.remote_name, n_locations * n_time)
    array = TimeMajorArray.from_space_major(raw, n_locations, n_time)
    del raw

    if variable.multiply_add is not None:
        multiply, add = variable.multiply_add
        array.multiply_add(multiply, add)

    if variable.is_accumulated_since_run_start:
        skip = 1 if variable.skip_first_hour else 0
        array.deaccumulate_over_time(skip=skip)

    return array


def export_diagnostic(array: TimeMajorArray, grid: GridDescriptor, variable: VariableSpec, path: Path):
    """Write a converted variable to a NetCDF file for visual verification"""
    data = array.transpose().reshape(array.n_time, grid.ny, grid.nx)
    ds = xr.Dataset(
        data_vars={variable.name: (['time', 'y', 'x'], data)},
        attrs={
            'domain': grid.name,
            'source_variable': variable.remote_name,
        }
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    ds.to_netcdf(path)
    logger.info(f"Wrote diagnostic file {path}")
