"""Drives a single-page fetch operation across all of its pages.

A fetch operation takes a request ``dict`` and returns a ``QueryResultsPage``
whose ``next_query`` is the request to issue next. The functions here keep
calling it until ``next_query`` is ``None``; the fetch operation itself holds
no cursor state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping

from warehouse_jobs.models.query import QueryResultsPage

logger = logging.getLogger(__name__)

# Options consumed by the driver and never sent to the service.
PAGINATOR_KEYS = frozenset({"autoPaginate", "maxApiCalls"})

PageFetcher = Callable[[dict[str, Any]], Awaitable[QueryResultsPage]]


def wire_params(options: Mapping[str, Any]) -> dict[str, Any]:
    """Strip driver-only keys from *options*."""
    return {k: v for k, v in options.items() if k not in PAGINATOR_KEYS}


async def stream_pages(
    fetch: PageFetcher,
    options: Mapping[str, Any] | None = None,
    *,
    incomplete_delay: float = 0.0,
) -> AsyncIterator[QueryResultsPage]:
    """Yield each complete page until no further pages remain.

    Responses for a job that has not finished are not yielded; the same
    request is reissued after ``incomplete_delay`` seconds. ``maxApiCalls`` in
    *options* caps the number of fetches.
    """
    query: dict[str, Any] | None = dict(options or {})
    max_api_calls = query.get("maxApiCalls")
    calls = 0

    while query is not None:
        if max_api_calls is not None and calls >= max_api_calls:
            logger.debug("Stopping after %d API calls", calls)
            return

        page = await fetch(query)
        calls += 1

        if page.rows is None:
            if page.next_query is not None and incomplete_delay:
                await asyncio.sleep(incomplete_delay)
        else:
            yield page

        query = page.next_query


async def stream_rows(
    fetch: PageFetcher,
    options: Mapping[str, Any] | None = None,
    *,
    incomplete_delay: float = 0.0,
) -> AsyncIterator[Any]:
    """Yield rows one at a time across all pages."""
    async for page in stream_pages(fetch, options, incomplete_delay=incomplete_delay):
        for row in page.rows:
            yield row


async def collect_rows(
    fetch: PageFetcher,
    options: Mapping[str, Any] | None = None,
    *,
    incomplete_delay: float = 0.0,
) -> list[Any]:
    """Gather every row across all pages into one list."""
    return [row async for row in stream_rows(fetch, options, incomplete_delay=incomplete_delay)]
