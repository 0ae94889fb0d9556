"""
MET Norway domains and variables

Static grid descriptors and per-variable metadata. Both registries are
read-only; callers look entries up by name.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from ...errors import InvalidArgument


@dataclass(frozen=True)
class GridDescriptor:
    """Spatial grid and run cadence of a model domain"""
    name: str
    nx: int
    ny: int
    dt_seconds: int
    file_length: int  # Time slots per store partition
    time_band: Tuple[int, int]  # Accepted forecast length, inclusive
    last_run_delay_hours: int  # Hours until a run is published
    url_template: str

    @property
    def location_count(self) -> int:
        return self.nx * self.ny

    def last_run(self, now: Optional[datetime] = None) -> datetime:
        """Most recent run expected to be published at `now`"""
        now = now or datetime.now(timezone.utc)
        published = now - timedelta(hours=self.last_run_delay_hours)
        return published.replace(minute=0, second=0, microsecond=0)

    def opendap_url(self, base_url: str, run: datetime) -> str:
        """OPeNDAP URL of a run"""
        return self.url_template.format(
            base_url=base_url.rstrip('/'),
            date=run.strftime('%Y%m%d'),
            hour=run.hour,
        )


@dataclass(frozen=True)
class VariableSpec:
    """How a remote variable is converted and stored"""
    name: str
    remote_name: str
    scale: float = 1.0
    offset: float = 0.0
    is_accumulated_since_run_start: bool = False
    skip_first_hour: bool = False
    scale_factor: float = 1.0  # Quantization: values are stored as round(value * scale_factor)

    @property
    def output_file_name(self) -> str:
        return self.name

    @property
    def multiply_add(self) -> Optional[Tuple[float, float]]:
        """(scale, offset) or None if the values are stored as read"""
        if self.scale == 1.0 and self.offset == 0.0:
            return None
        return self.scale, self.offset


DOMAINS: Dict[str, GridDescriptor] = {
    'nordic_pp': GridDescriptor(
        name='nordic_pp',
        nx=1796,
        ny=2321,
        dt_seconds=3600,
        file_length=64 + 2 * 24,
        time_band=(58, 64),
        last_run_delay_hours=2,
        url_template='{base_url}/met_forecast_1_0km_nordic_{date}T{hour:02d}Z.nc',
    ),
}


VARIABLES: Dict[str, VariableSpec] = {
    'temperature_2m': VariableSpec(
        name='temperature_2m',
        remote_name='air_temperature_2m',
        offset=-273.15,  # Kelvin to Celsius
        scale_factor=20,
    ),
    'cloudcover': VariableSpec(
        name='cloudcover',
        remote_name='cloud_area_fraction',
        scale=100,  # Fraction to percent
        scale_factor=1,
    ),
    'pressure_msl': VariableSpec(
        name='pressure_msl',
        remote_name='air_pressure_at_sea_level',
        scale=1 / 100,  # Pa to hPa
        scale_factor=10,
    ),
    'relativehumidity_2m': VariableSpec(
        name='relativehumidity_2m',
        remote_name='relative_humidity_2m',
        scale=100,
        scale_factor=1,
    ),
    'windspeed_10m': VariableSpec(
        name='windspeed_10m',
        remote_name='wind_speed_10m',
        scale_factor=10,
    ),
    'winddirection_10m': VariableSpec(
        name='winddirection_10m',
        remote_name='wind_direction_10m',
        scale_factor=1,
    ),
    'windgusts_10m': VariableSpec(
        name='windgusts_10m',
        remote_name='wind_speed_of_gust',
        scale_factor=10,
    ),
    'shortwave_radiation': VariableSpec(
        name='shortwave_radiation',
        remote_name='integral_of_surface_downwelling_shortwave_flux_in_air_wrt_time',
        scale=1 / 3600,  # J/m2 accumulated over one hour to W/m2
        is_accumulated_since_run_start=True,
        skip_first_hour=True,
        scale_factor=1,
    ),
    'precipitation': VariableSpec(
        name='precipitation',
        remote_name='precipitation_amount',
        skip_first_hour=True,
        scale_factor=10,
    ),
}


def get_domain(name: str) -> GridDescriptor:
    """Look up a domain by name"""
    if name not in DOMAINS:
        raise InvalidArgument(f"Invalid domain '{name}'. Available: {list(DOMAINS.keys())}")
    return DOMAINS[name]


def parse_variables(names: Optional[str]) -> List[VariableSpec]:
    """
    Parse a comma separated list of variable names.

    Args:
        names: e.g. "temperature_2m,precipitation" or None for all variables

    Returns:
        Variables in the given order
    """
    if names is None:
        return list(VARIABLES.values())

    variables = []
    for name in names.split(','):
        name = name.strip()
        if name not in VARIABLES:
            raise InvalidArgument(f"Invalid variable '{name}'")
        variables.append(VARIABLES[name])
    return variables


def resolve_run(
    domain: GridDescriptor,
    run_hour: Optional[int] = None,
    past_days: int = 0,
    now: Optional[datetime] = None
) -> datetime:
    """
    Get the reference time of the run to ingest.

    Args:
        domain: Model domain
        run_hour: Explicit run hour (0-23) or None for the latest published run
        past_days: Shift the run back by this many days
        now: Current time (UTC), defaults to the system clock

    Returns:
        Timezone aware run time aligned to the hour
    """
    now = now or datetime.now(timezone.utc)
    if past_days < 0:
        raise InvalidArgument(f"Invalid past days '{past_days}'")

    if run_hour is None:
        return domain.last_run(now) - timedelta(days=past_days)

    if not 0 <= run_hour <= 23:
        raise InvalidArgument(f"Invalid run '{run_hour}'")
    date = now - timedelta(days=past_days)
    return date.replace(hour=run_hour, minute=0, second=0, microsecond=0)
