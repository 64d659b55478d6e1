"""Async client for data-warehouse jobs: polling, cancellation and query-result paging."""

from warehouse_jobs.errors.exceptions import (
    ApiError,
    JobFailedError,
    JobTimeoutError,
    UnsupportedCapabilityError,
    WarehouseError,
)
from warehouse_jobs.job import Job
from warehouse_jobs.models.query import QueryResultsPage
from warehouse_jobs.operation import wait_for_completion
from warehouse_jobs.service import Warehouse

__all__ = [
    "ApiError",
    "Job",
    "JobFailedError",
    "JobTimeoutError",
    "QueryResultsPage",
    "UnsupportedCapabilityError",
    "Warehouse",
    "WarehouseError",
    "wait_for_completion",
]
