"""Background scheduler ingesting the latest MET Norway run every hour"""

import logging
import sys
import time
from pathlib import Path

import schedule

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from forecast_ingest.errors import IngestError
from forecast_ingest.pipelines.metno import MetNoConverter, get_domain, parse_variables, resolve_run
from forecast_ingest.storage import get_storage_config

logger = logging.getLogger(__name__)

DOMAIN = "nordic_pp"


def ingest_latest_run(domain_name: str = DOMAIN) -> bool:
    """Ingest the latest published run of a domain

    Failures are logged and reported as False so the scheduler keeps running.
    """
    domain = get_domain(domain_name)
    run = resolve_run(domain)
    logger.info(f"Ingesting {domain.name} run {run.isoformat()}")

    config = get_storage_config()
    config.ensure_directories(domain.name)

    try:
        MetNoConverter(domain, config=config).convert(parse_variables(None), run)
    except (IngestError, OSError) as e:
        logger.error(f"Ingesting {domain.name} run {run.isoformat()} failed: {e}")
        return False
    except Exception:
        logger.exception(f"Unexpected error ingesting {domain.name} run {run.isoformat()}")
        return False

    logger.info(f"Ingested {domain.name} run {run.isoformat()}")
    return True


def main():
    """Main scheduler loop"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting forecast ingestion worker...")

    # Runs are published hourly
    schedule.every(1).hours.at(":15").do(ingest_latest_run)

    logger.info("Worker started successfully")

    # Run scheduler
    while True:
        schedule.run_pending()
        time.sleep(60)  # Check every minute


if __name__ == "__main__":
    main()
