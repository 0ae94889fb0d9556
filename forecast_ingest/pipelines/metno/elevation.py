"""Static surface elevation with sea cells masked"""

import logging
from pathlib import Path

import numpy as np

from ...storage.timeseries import TimeSeriesStore
from .domains import GridDescriptor
from .reader import RemoteDataset
from .transform import read_float_array

logger = logging.getLogger(__name__)

SEA_ELEVATION = -999.0
LAND_FRACTION_THRESHOLD = 0.5
ELEVATION_CHUNKS = (20, 20)


def mask_sea(altitude: np.ndarray, land_fraction: np.ndarray) -> np.ndarray:
    """Replace the altitude of cells with less than 50% land by -999"""
    return np.where(land_fraction < LAND_FRACTION_THRESHOLD, np.float32(SEA_ELEVATION), altitude).astype(np.float32)


def ensure_elevation_mask(
    dataset: RemoteDataset,
    grid: GridDescriptor,
    store: TimeSeriesStore,
    output_path: Path
) -> bool:
    """
    Create the elevation file of a grid unless it already exists.

    Returns:
        True if the file was written
    """
    if store.exists(output_path):
        logger.debug(f"Elevation file {output_path} exists")
        return False

    logger.info("Creating elevation file")
    # unit meters
    altitude = read_float_array(dataset, 'altitude', grid.location_count)
    # 0=sea, 1=land
    land_fraction = read_float_array(dataset, 'land_area_fraction', grid.location_count)
    elevation = mask_sea(altitude, land_fraction)

    logger.info("Writing elevation file")
    store.write_static(
        output_path,
        elevation.reshape(grid.ny, grid.nx),
        chunks=ELEVATION_CHUNKS,
        scale_factor=1,
    )
    return True
