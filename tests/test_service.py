"""Tests for the Warehouse service root over a mocked HTTP transport."""

import json

import httpx
import pytest

from warehouse_jobs.config import Settings
from warehouse_jobs.errors.exceptions import ApiError
from warehouse_jobs.job import Job
from warehouse_jobs.service import Warehouse

from conftest import JOB_ID, LOCATION, PROJECT_ID


def _json(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(body).encode(), headers={"content-type": "application/json"})


@pytest.mark.asyncio
async def test_request_resolves_uri_and_drops_unset_params(make_warehouse):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, {"ok": True})

    warehouse = make_warehouse(handler)
    body = await warehouse.request("GET", f"/jobs/{JOB_ID}", params={"location": None, "maxResults": 5})

    assert body == {"ok": True}
    assert seen[0].url.path == f"/v2/projects/{PROJECT_ID}/jobs/{JOB_ID}"
    assert dict(seen[0].url.params) == {"maxResults": "5"}


@pytest.mark.asyncio
async def test_request_sends_json_body(make_warehouse):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, {})

    warehouse = make_warehouse(handler)
    await warehouse.request("PATCH", "/jobs/x", json={"labels": {"a": "b"}})

    assert seen[0].method == "PATCH"
    assert json.loads(seen[0].content) == {"labels": {"a": "b"}}


@pytest.mark.asyncio
async def test_error_status_raises_api_error(make_warehouse):
    error_body = {
        "error": {
            "code": 404,
            "message": "Not found: Job my-project:job_missing",
            "errors": [{"reason": "notFound", "message": "Not found: Job my-project:job_missing"}],
        }
    }
    warehouse = make_warehouse(lambda request: _json(404, error_body))

    with pytest.raises(ApiError) as exc_info:
        await warehouse.request("GET", "/jobs/job_missing")

    err = exc_info.value
    assert err.status_code == 404
    assert err.code == "notFound"
    assert err.message.startswith("Not found")
    assert err.response == error_body


@pytest.mark.asyncio
async def test_error_status_with_plain_body(make_warehouse):
    warehouse = make_warehouse(lambda request: httpx.Response(502, text="Bad gateway"))

    with pytest.raises(ApiError) as exc_info:
        await warehouse.request("GET", "/jobs/x")

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Bad gateway"


@pytest.mark.asyncio
async def test_empty_body_returns_empty_dict(make_warehouse):
    warehouse = make_warehouse(lambda request: httpx.Response(204))
    assert await warehouse.request("POST", "/jobs/x/cancel") == {}


@pytest.mark.asyncio
async def test_transport_error_propagates(make_warehouse):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    warehouse = make_warehouse(handler)
    with pytest.raises(httpx.ConnectError):
        await warehouse.request("GET", "/jobs/x")


def test_job_factory_uses_default_location(make_warehouse):
    warehouse = make_warehouse(lambda request: _json(200, {}), location="EU")
    job = warehouse.job(JOB_ID)
    assert isinstance(job, Job)
    assert job.warehouse is warehouse
    assert job.location == "EU"
    assert warehouse.job(JOB_ID, location="US").location == "US"


def test_project_id_required():
    with pytest.raises(ValueError):
        Warehouse(settings=Settings(project_id=""))


@pytest.mark.asyncio
async def test_owned_client_is_closed(test_settings):
    warehouse = Warehouse(PROJECT_ID, settings=test_settings)
    client = warehouse._get_client()
    await warehouse.aclose()
    assert client.is_closed
    assert warehouse._client is None


@pytest.mark.asyncio
async def test_injected_client_is_left_open(test_settings):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    async with Warehouse(PROJECT_ID, settings=test_settings, client=client):
        pass
    assert not client.is_closed
    await client.aclose()


# ---------------------------------------------------------------------------
# End to end through the HTTP layer
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_poll_done_with_location(make_warehouse):
    seen = []
    body = {"id": f"{PROJECT_ID}:{JOB_ID}", "status": {"state": "DONE"}}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, body)

    warehouse = make_warehouse(handler)
    job = warehouse.job(JOB_ID, location=LOCATION)

    metadata = await job.poll()

    assert metadata == body
    assert seen[0].url.path.endswith(f"/jobs/{JOB_ID}")
    assert seen[0].url.params["location"] == LOCATION


@pytest.mark.asyncio
async def test_cancel_with_location(make_warehouse):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, {"job": {"status": {"state": "RUNNING"}}})

    warehouse = make_warehouse(handler)
    await warehouse.job(JOB_ID, location=LOCATION).cancel()

    assert seen[0].method == "POST"
    assert seen[0].url.path.endswith(f"/jobs/{JOB_ID}/cancel")
    assert seen[0].url.params["location"] == LOCATION


@pytest.mark.asyncio
async def test_query_results_merge_schema(make_warehouse):
    response = {
        "jobComplete": True,
        "schema": {"fields": [{"name": "n", "type": "INTEGER"}, {"name": "s", "type": "STRING"}]},
        "rows": [{"f": [{"v": "1"}, {"v": "a"}]}, {"f": [{"v": "2"}, {"v": None}]}],
        "pageToken": "next",
    }
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _json(200, response)

    warehouse = make_warehouse(handler)
    page = await warehouse.job(JOB_ID).get_query_results({"maxResults": 2})

    assert page.rows == [{"n": 1, "s": "a"}, {"n": 2, "s": None}]
    assert page.next_query == {"location": None, "maxResults": 2, "pageToken": "next"}
    assert seen[0].url.path.endswith(f"/queries/{JOB_ID}")
    assert dict(seen[0].url.params) == {"maxResults": "2"}
