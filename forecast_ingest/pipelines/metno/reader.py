"""
NetCDF / OPeNDAP dataset reader

Thin wrapper around xarray that exposes only what the ingestion pipeline
needs: dimension lengths and raw float arrays. Works with local files and
OPeNDAP URLs (netCDF4 engine).
"""

import logging
from typing import Dict, List, Optional

import numpy as np
import xarray as xr

from ...errors import DatasetNotFound

logger = logging.getLogger(__name__)


class RemoteDataset:
    """An open dataset"""

    def __init__(self, ds: xr.Dataset, path: str = ""):
        self._ds = ds
        self.path = path

    def dimensions(self) -> Dict[str, int]:
        """Dimension name -> length"""
        return {str(name): int(length) for name, length in self._ds.sizes.items()}

    def read_array(self, name: str) -> Optional[np.ndarray]:
        """
        Read a variable as a numpy array.

        Returns:
            Array in the dataset's native dtype, or None if the variable does not exist
        """
        if name not in self._ds.variables:
            return None
        return np.asarray(self._ds[name].values)

    def describe(self) -> List[str]:
        """Human readable listing of dimensions, variables and attributes"""
        lines = [f"Dataset: {self.path}"]
        for name, length in self.dimensions().items():
            lines.append(f"Dimension: {name} {length}")
        for name, var in self._ds.variables.items():
            lines.append(f"Variable: {name} {var.dtype} {tuple(var.dims)}")
        for key, value in self._ds.attrs.items():
            lines.append(f"Attribute: {key} {value}")
        return lines

    def close(self):
        self._ds.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _is_not_found(error: OSError) -> bool:
    """netCDF reports a missing OPeNDAP resource as '[Errno -90] NetCDF: file not found'"""
    return isinstance(error, FileNotFoundError) or 'file not found' in str(error).lower()


class DatasetReader:
    """Opens datasets with xarray"""

    def __init__(self, engine: Optional[str] = None):
        self.engine = engine

    def open(self, path: str) -> RemoteDataset:
        """
        Open a dataset by path or URL.

        Raises:
            DatasetNotFound: The dataset does not exist (yet)
            OSError: Any other failure to open
        """
        try:
            ds = xr.open_dataset(path, engine=self.engine, decode_times=False, cache=False)
        except OSError as e:
            if _is_not_found(e):
                raise DatasetNotFound(f"Dataset not found: {path}") from e
            raise
        return RemoteDataset(ds, path=path)
