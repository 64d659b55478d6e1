"""Tests for the page-driving helpers."""

from unittest.mock import AsyncMock, patch

import pytest

from warehouse_jobs import paginator
from warehouse_jobs.models.query import QueryResultsPage


def _page(rows, next_query=None, **response):
    return QueryResultsPage(rows=rows, next_query=next_query, response=response)


def test_wire_params_strips_driver_keys():
    assert paginator.wire_params({"a": 1, "autoPaginate": False, "maxApiCalls": 2}) == {"a": 1}


@pytest.mark.asyncio
async def test_stream_pages_follows_next_query():
    fetch = AsyncMock(side_effect=[
        _page([1], {"pageToken": "p2"}),
        _page([2], {"pageToken": "p3"}),
        _page([3]),
    ])

    pages = [page async for page in paginator.stream_pages(fetch, {"q": 1})]

    assert [p.rows for p in pages] == [[1], [2], [3]]
    assert [c.args[0] for c in fetch.await_args_list] == [{"q": 1}, {"pageToken": "p2"}, {"pageToken": "p3"}]


@pytest.mark.asyncio
async def test_incomplete_pages_are_retried_after_delay():
    fetch = AsyncMock(side_effect=[
        _page(None, {"q": 1}, jobComplete=False),
        _page([1, 2]),
    ])

    with patch("warehouse_jobs.paginator.asyncio.sleep", new=AsyncMock()) as sleep:
        pages = [page async for page in paginator.stream_pages(fetch, {"q": 1}, incomplete_delay=0.25)]

    assert len(pages) == 1
    sleep.assert_awaited_once_with(0.25)


@pytest.mark.asyncio
async def test_max_api_calls_caps_fetches():
    fetch = AsyncMock(side_effect=lambda query: _page([query.get("n", 0)], {"n": query.get("n", 0) + 1, "maxApiCalls": 2}))

    rows = await paginator.collect_rows(fetch, {"maxApiCalls": 2})

    assert rows == [0, 1]
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_stream_rows_and_collect_rows():
    fetch = AsyncMock(side_effect=[_page(["a", "b"], {"t": 1}), _page([])])
    assert [r async for r in paginator.stream_rows(fetch)] == ["a", "b"]


@pytest.mark.asyncio
async def test_stream_is_lazy():
    fetch = AsyncMock(side_effect=[_page([1], {"t": 1}), _page([2])])
    stream = paginator.stream_pages(fetch)
    first = await anext(stream)
    assert first.rows == [1]
    assert fetch.await_count == 1
    await stream.aclose()
