"""
MET Norway forecast converter

Opens one run of a MET Norway domain over OPeNDAP, checks its shape, creates
the static elevation file on first use and updates the time series store
variable by variable.

Variables are processed one after another so that only one raw array is
held in memory at a time.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ...settings import IngestSettings, get_settings
from ...storage import StorageConfig, TimeSeriesStore, RingTimeRange, get_storage_config
from .domains import GridDescriptor, VariableSpec
from .elevation import ensure_elevation_mask
from .fetcher import acquire
from .reader import DatasetReader
from .schema import validate_schema
from .transform import TimeMajorArray, export_diagnostic, transform_variable

logger = logging.getLogger(__name__)


def write_time_oriented(
    store: TimeSeriesStore,
    variable: VariableSpec,
    array: TimeMajorArray,
    ring: RingTimeRange,
    skip_first: int
):
    """Forward a converted variable to the store"""
    store.update_from_time_oriented(
        variable.output_file_name,
        array.data,
        ring,
        skip_first=skip_first,
        skip_last=0,
        smooth=0,
        scale_factor=variable.scale_factor,
    )


class MetNoConverter:
    """Converts MET Norway runs into time series stores"""

    def __init__(
        self,
        domain: GridDescriptor,
        reader: Optional[DatasetReader] = None,
        store: Optional[TimeSeriesStore] = None,
        config: Optional[StorageConfig] = None,
        settings: Optional[IngestSettings] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize converter.

        Args:
            domain: Grid to convert
            reader: Dataset reader (xarray based if not provided)
            store: Time series store (created in the domain's store directory if not provided)
            config: Storage configuration (uses global if not provided)
            settings: Acquisition settings (uses global if not provided)
            clock: Current time in seconds since epoch
            sleep: Blocking sleep used between acquisition attempts
        """
        self.domain = domain
        self.config = config or get_storage_config()
        self.settings = settings or get_settings()
        self.reader = reader or DatasetReader()
        self.store = store or TimeSeriesStore(
            self.config.get_store_directory(domain.name),
            n_locations=domain.location_count,
            n_time_per_file=domain.file_length,
            config=self.config,
        )
        self.clock = clock
        self.sleep = sleep

    def dataset_path(self, run: datetime) -> str:
        return self.domain.opendap_url(self.settings.opendap_base_url, run)

    def convert(
        self,
        variables: List[VariableSpec],
        run: datetime,
        create_netcdf: bool = False,
        skip_existing: bool = False,
        path: Optional[str] = None
    ) -> RingTimeRange:
        """
        Process each variable and update the time series store.

        Args:
            variables: Variables in processing order
            run: Run reference time
            create_netcdf: Also write a NetCDF file per variable for verification
            skip_existing: Do not rewrite NetCDF files that already exist
            path: Dataset path or URL (OPeNDAP URL of the run if not provided)

        Returns:
            Time slots updated by this run
        """
        path = path or self.dataset_path(run)
        deadline = self.clock() + self.settings.deadline_seconds

        logger.info(f"Opening {path}")
        dataset = acquire(
            self.reader, path, deadline,
            settings=self.settings, clock=self.clock, sleep=self.sleep
        )
        with dataset:
            for line in dataset.describe():
                logger.debug(line)

            n_time = validate_schema(dataset, self.domain)
            ensure_elevation_mask(
                dataset, self.domain, self.store,
                self.config.get_elevation_store_path(self.domain.name)
            )

            ring = RingTimeRange.from_run(run, self.domain.dt_seconds, n_time)
            logger.info(f"Run {run.isoformat()} covers time slots {ring.start}-{ring.end}")

            for variable in variables:
                self._convert_variable(dataset, variable, ring, create_netcdf, skip_existing)

        return ring

    def _convert_variable(self, dataset, variable: VariableSpec, ring: RingTimeRange,
                          create_netcdf: bool, skip_existing: bool):
        logger.info(f"Converting {variable.name}")
        start_convert = time.perf_counter()

        array = transform_variable(dataset, variable, self.domain.location_count, len(ring))
        skip = 1 if variable.skip_first_hour else 0

        if create_netcdf:
            netcdf_path = self.config.get_download_directory(self.domain.name) / f"{variable.output_file_name}.nc"
            if skip_existing and netcdf_path.exists():
                logger.info(f"Skipping existing {netcdf_path}")
            else:
                export_diagnostic(array, self.domain, variable, netcdf_path)

        logger.info(
            f"Reading and conversion done in {time.perf_counter() - start_convert:.1f}s. "
            f"Starting store update"
        )
        start_store = time.perf_counter()
        write_time_oriented(self.store, variable, array, ring, skip_first=skip)
        del array
        logger.info(f"Store update finished in {time.perf_counter() - start_store:.1f}s")
