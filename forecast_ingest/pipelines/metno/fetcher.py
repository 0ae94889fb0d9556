"""
Retrying dataset fetcher

MET Norway publishes each run on THREDDS some time after its reference hour.
Until then, opening the OPeNDAP URL fails with "file not found", so the
fetcher keeps retrying at a fixed interval until a deadline.
"""

import logging
import time
from typing import Callable, Optional

from ...errors import DatasetNotFound, TimeoutExceeded
from ...settings import IngestSettings, get_settings
from .reader import DatasetReader, RemoteDataset

logger = logging.getLogger(__name__)


def acquire(
    reader: DatasetReader,
    path: str,
    deadline: float,
    settings: Optional[IngestSettings] = None,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
) -> RemoteDataset:
    """
    Open a dataset, waiting for it to be published.

    Only DatasetNotFound is retried. Any other error is raised immediately.
    A backoff sleep cannot be interrupted; the deadline is checked after
    each sleep, before the next attempt.

    Args:
        reader: Reader used to open the dataset
        path: File path or OPeNDAP URL
        deadline: Give up after this time (seconds since epoch)
        settings: Retry interval and log interval (global settings if not provided)
        clock: Returns the current time in seconds since epoch
        sleep: Blocks for the given number of seconds

    Returns:
        The open dataset

    Raises:
        TimeoutExceeded: Deadline reached while the dataset was still unavailable
    """
    settings = settings or get_settings()
    start_time = clock()
    last_print = start_time - settings.progress_log_seconds

    while True:
        try:
            return reader.open(path)
        except DatasetNotFound:
            now = clock()
            if now - last_print >= settings.progress_log_seconds:
                elapsed_minutes = int((now - start_time) / 60)
                logger.info(
                    f"Dataset not available yet, retry every {settings.retry_seconds:g} seconds "
                    f"({elapsed_minutes} minutes elapsed): {path}"
                )
                last_print = now
            sleep(settings.retry_seconds)
            if clock() > deadline:
                logger.error(f"Deadline reached while waiting for {path}")
                raise TimeoutExceeded(f"Dataset {path} not available before deadline")
