"""
Shared fixtures: a small synthetic grid, in-memory datasets, a scripted
reader and a fake clock.
"""

from datetime import datetime, timezone
from pathlib import Path
import sys

import numpy as np
import pytest
import xarray as xr

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from forecast_ingest.errors import DatasetNotFound
from forecast_ingest.pipelines.metno import GridDescriptor, RemoteDataset
from forecast_ingest.settings import IngestSettings
from forecast_ingest.storage import StorageConfig, TimeSeriesStore

NX = 20
NY = 10
N_TIME = 60
RUN = datetime(2024, 1, 1, 6, tzinfo=timezone.utc)


class FakeClock:
    """Clock whose time only advances when sleep() is called"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedReader:
    """Reader returning (or raising) the given results in order, repeating the last one"""

    def __init__(self, *results):
        self.results = list(results)
        self.paths = []

    def open(self, path: str):
        self.paths.append(path)
        result = self.results[0] if len(self.results) == 1 else self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_dataset(nx: int = NX, ny: int = NY, n_time: int = N_TIME, variables=None, static=None) -> xr.Dataset:
    """
    Build a dataset with the layout of a MET Nordic forecast file.

    Args:
        variables: name -> array of shape (n_time, ny, nx)
        static: name -> array of shape (ny, nx)
    """
    data_vars = {}
    for name, values in (variables or {}).items():
        data_vars[name] = (['time', 'y', 'x'], values)
    for name, values in (static or {}).items():
        data_vars[name] = (['y', 'x'], values)
    coords = {
        'time': np.arange(n_time, dtype=np.float64) * 3600,
        'y': np.arange(ny, dtype=np.float64),
        'x': np.arange(nx, dtype=np.float64),
    }
    return xr.Dataset(data_vars=data_vars, coords=coords)


@pytest.fixture
def grid():
    return GridDescriptor(
        name='test_grid',
        nx=NX,
        ny=NY,
        dt_seconds=3600,
        file_length=48,
        time_band=(58, 64),
        last_run_delay_hours=2,
        url_template='{base_url}/test_grid_{date}T{hour:02d}Z.nc',
    )


@pytest.fixture
def settings():
    return IngestSettings(
        retry_seconds=10,
        progress_log_seconds=60,
        deadline_seconds=3600,
        opendap_base_url='https://example.com/thredds',
    )


@pytest.fixture
def storage_config(tmp_path):
    return StorageConfig(base_path=tmp_path / 'data', location_chunk_size=64)


@pytest.fixture
def store(grid, storage_config):
    return TimeSeriesStore(
        storage_config.get_store_directory(grid.name),
        n_locations=grid.location_count,
        n_time_per_file=grid.file_length,
        config=storage_config,
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def static_fields():
    """Altitude with half of the columns at sea"""
    rng = np.random.default_rng(0)
    altitude = rng.uniform(0, 1500, size=(NY, NX)).astype(np.float32)
    land_fraction = np.zeros((NY, NX), dtype=np.float32)
    land_fraction[:, NX // 2:] = 1.0
    land_fraction[0, 0] = 0.5  # On the threshold counts as land
    return altitude, land_fraction


@pytest.fixture
def temperature():
    """Air temperature in Kelvin, shape (time, y, x)"""
    rng = np.random.default_rng(1)
    return rng.uniform(250, 300, size=(N_TIME, NY, NX)).astype(np.float32)


@pytest.fixture
def forecast_dataset(static_fields, temperature):
    altitude, land_fraction = static_fields
    ds = make_dataset(
        variables={'air_temperature_2m': temperature},
        static={'altitude': altitude, 'land_area_fraction': land_fraction},
    )
    return RemoteDataset(ds, path='memory://forecast')


@pytest.fixture
def not_found():
    return DatasetNotFound('Dataset not found: memory://forecast')
