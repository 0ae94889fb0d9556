#!/usr/bin/env python3
"""
Ingest MET Norway Forecast

Downloads a MET Norway forecast run over OPeNDAP and updates the local time
series stores. Waits up to one hour for the run to be published.

Usage:
    python runs/ingest_metno.py nordic_pp
    python runs/ingest_metno.py nordic_pp --run 6 --past-days 1
    python runs/ingest_metno.py nordic_pp --only-variables temperature_2m,precipitation --create-netcdf
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from forecast_ingest.errors import IngestError, InvalidArgument
from forecast_ingest.pipelines.metno import MetNoConverter, get_domain, parse_variables, resolve_run
from forecast_ingest.storage import get_storage_config

logger = logging.getLogger(__name__)


def parse_run_hour(value: Optional[str]) -> Optional[int]:
    """Parse the --run option, None selects the latest run"""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise InvalidArgument(f"Invalid run '{value}'") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download MET Norway models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python runs/ingest_metno.py nordic_pp
    python runs/ingest_metno.py nordic_pp --run 6 --past-days 1
""",
    )
    parser.add_argument("domain", help="Domain name (e.g. nordic_pp)")
    parser.add_argument("--run", help="Run hour (0-23), default: latest published run")
    parser.add_argument("--past-days", type=int, default=0, help="Ingest the run of N days ago")
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Do not rewrite NetCDF files that already exist",
    )
    parser.add_argument(
        "--create-netcdf",
        action="store_true",
        help="Write a NetCDF file per variable for verification",
    )
    parser.add_argument("--only-variables", help="Comma separated list of variables")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def ingest(args: argparse.Namespace) -> bool:
    """Validate arguments, then convert the selected run"""
    start = time.perf_counter()

    domain = get_domain(args.domain)
    run_hour = parse_run_hour(args.run)
    variables = parse_variables(args.only_variables)
    run = resolve_run(domain, run_hour=run_hour, past_days=args.past_days)

    logger.info(f"Downloading domain '{domain.name}' run '{run.strftime('%Y-%m-%d %H:%M')}'")

    config = get_storage_config()
    config.ensure_directories(domain.name)

    converter = MetNoConverter(domain, config=config)
    converter.convert(
        variables,
        run,
        create_netcdf=args.create_netcdf,
        skip_existing=args.skip_existing,
    )
    logger.info(f"Finished in {time.perf_counter() - start:.1f}s")
    return True


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        success = ingest(args)
        sys.exit(0 if success else 1)

    except IngestError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except OSError as e:
        logger.error(f"Could not open dataset: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
