"""Shared test fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest

from warehouse_jobs.config import Settings
from warehouse_jobs.job import Job
from warehouse_jobs.service import Warehouse

PROJECT_ID = "my-project"
JOB_ID = "job_XYrk_3z"
LOCATION = "asia-northeast1"
API_ENDPOINT = "https://warehouse.test/v2"


class FakeWarehouse:
    """Stands in for the service root: records requests, returns canned bodies."""

    def __init__(self):
        self.project_id = PROJECT_ID
        self.settings = Settings(project_id=PROJECT_ID, poll_interval=0)
        self.request = AsyncMock(return_value={})

    @staticmethod
    def merge_schema_with_rows(schema, rows):
        return rows


@pytest.fixture
def test_settings() -> Settings:
    return Settings(project_id=PROJECT_ID, api_endpoint=API_ENDPOINT, poll_interval=0)


@pytest.fixture
def warehouse() -> FakeWarehouse:
    return FakeWarehouse()


@pytest.fixture
def job(warehouse) -> Job:
    return Job(warehouse, JOB_ID)


@pytest.fixture
def located_job(warehouse) -> Job:
    return Job(warehouse, JOB_ID, location=LOCATION)


@pytest.fixture
def make_warehouse(test_settings):
    """Build a real Warehouse whose HTTP exchanges are answered by *handler*."""
    created = []

    def _make(handler, **kwargs) -> Warehouse:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        created.append(client)
        return Warehouse(PROJECT_ID, settings=test_settings, client=client, **kwargs)

    return _make
