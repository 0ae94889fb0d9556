"""
MET Norway forecast pipeline

Converts the hourly MET Nordic post-processed forecast into time series
stores.

Example usage:
    from forecast_ingest.pipelines.metno import MetNoConverter, get_domain, parse_variables, resolve_run

    domain = get_domain("nordic_pp")
    converter = MetNoConverter(domain)
    converter.convert(parse_variables("temperature_2m"), resolve_run(domain))
"""

from .converter import MetNoConverter, write_time_oriented
from .domains import (
    DOMAINS,
    VARIABLES,
    GridDescriptor,
    VariableSpec,
    get_domain,
    parse_variables,
    resolve_run,
)
from .elevation import ensure_elevation_mask
from .fetcher import acquire
from .reader import DatasetReader, RemoteDataset
from .schema import validate_schema
from .transform import TimeMajorArray, export_diagnostic, transform_variable

__all__ = [
    "MetNoConverter",
    "write_time_oriented",
    "DOMAINS",
    "VARIABLES",
    "GridDescriptor",
    "VariableSpec",
    "get_domain",
    "parse_variables",
    "resolve_run",
    "ensure_elevation_mask",
    "acquire",
    "DatasetReader",
    "RemoteDataset",
    "validate_schema",
    "TimeMajorArray",
    "export_diagnostic",
    "transform_variable",
]
