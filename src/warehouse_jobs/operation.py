"""Wait-until-complete loop over ``Job.poll``.

The job handle reports one observation per call; this module owns the
sleeping, back-off and deadline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Iterator

from warehouse_jobs.errors.exceptions import JobTimeoutError
from warehouse_jobs.logging_config import bind_job_context, clear_job_context

if TYPE_CHECKING:
    from warehouse_jobs.job import Job

logger = logging.getLogger(__name__)


def backoff_delays(interval: float, max_interval: float, backoff: float) -> Iterator[float]:
    """Yield sleep intervals growing by *backoff* up to *max_interval*."""
    delay = interval
    while True:
        yield delay
        delay = min(delay * backoff, max_interval)


async def wait_for_completion(
    job: Job,
    *,
    interval: float | None = None,
    max_interval: float | None = None,
    backoff: float | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Poll *job* until it is ``DONE`` and return its final metadata.

    Raises:
        JobFailedError: The job finished with errors.
        JobTimeoutError: *timeout* seconds passed first.
        ApiError / httpx.HTTPError: A poll request failed.
    """
    settings = job.warehouse.settings
    interval = settings.poll_interval if interval is None else interval
    max_interval = settings.poll_max_interval if max_interval is None else max_interval
    backoff = settings.poll_backoff if backoff is None else backoff
    timeout = settings.wait_timeout if timeout is None else timeout

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None
    delays = backoff_delays(interval, max_interval, backoff)
    attempts = 0

    bind_job_context(job)
    try:
        while True:
            attempts += 1
            metadata = await job.poll()
            if metadata is not None:
                logger.info("Job %s completed after %d polls", job.id, attempts)
                return metadata

            delay = next(delays)
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise JobTimeoutError(job.id, timeout)
                delay = min(delay, remaining)

            logger.debug("Job %s not done, next poll in %.2fs", job.id, delay)
            await asyncio.sleep(delay)
    finally:
        clear_job_context()
