"""Dataset shape checks against a grid descriptor"""

import logging

from ...errors import SchemaMismatch
from .domains import GridDescriptor
from .reader import RemoteDataset

logger = logging.getLogger(__name__)

REQUIRED_DIMENSIONS = ('x', 'y', 'time')


def validate_schema(dataset: RemoteDataset, grid: GridDescriptor) -> int:
    """
    Check that the dataset has the grid's x/y size and a plausible forecast length.

    Returns:
        Length of the time dimension

    Raises:
        SchemaMismatch: On any difference
    """
    dimensions = dataset.dimensions()
    if len(dimensions) != 3:
        raise SchemaMismatch(f"Expected 3 dimensions, got {len(dimensions)}: {list(dimensions.keys())}")

    missing = [name for name in REQUIRED_DIMENSIONS if name not in dimensions]
    if missing:
        raise SchemaMismatch(f"Missing dimensions {missing}, got {list(dimensions.keys())}")

    nx, ny, n_time = dimensions['x'], dimensions['y'], dimensions['time']
    if nx != grid.nx or ny != grid.ny:
        raise SchemaMismatch(f"Wrong domain dimensions {nx}, {ny}, expected {grid.nx}, {grid.ny}")

    low, high = grid.time_band
    if not low <= n_time <= high:
        raise SchemaMismatch(f"Wrong time dimensions {n_time}, expected {low}-{high}")

    logger.debug(f"Dataset matches grid {grid.name}: nx={nx} ny={ny} time={n_time}")
    return n_time
