"""Client-side handle for one server-side job.

The handle is addressable and stateless between calls: every operation issues
one request and returns what it learned. Status and page cursors live in the
returned values, never on the handle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping

from warehouse_jobs import paginator
from warehouse_jobs.errors.exceptions import JobFailedError
from warehouse_jobs.models.enums import JobState
from warehouse_jobs.models.query import QueryResultsPage
from warehouse_jobs.resource import RemoteResource, RequestShape

if TYPE_CHECKING:
    from warehouse_jobs.service import Warehouse

logger = logging.getLogger(__name__)


class Job:
    """A query, load, export or copy job running on the service.

    Args:
        warehouse: The service root that owns this job. Shared, not managed.
        id: The job ID.
        location: Processing location of the job. Sent with every request
            that accepts it.
    """

    def __init__(self, warehouse: Warehouse, id: str, location: str | None = None) -> None:
        self._warehouse = warehouse
        self._id = id
        self._location = location
        self._resource = RemoteResource(
            parent=warehouse,
            base_url="/jobs",
            id=id,
            methods={
                "exists": True,
                "get": True,
                "set_metadata": True,
                "get_metadata": RequestShape(params={"location": location}),
            },
        )

    def __repr__(self) -> str:
        return f"Job(id={self._id!r}, location={self._location!r})"

    @property
    def warehouse(self) -> Warehouse:
        return self._warehouse

    @property
    def id(self) -> str:
        return self._id

    @property
    def location(self) -> str | None:
        return self._location

    @property
    def methods(self) -> Mapping[str, RequestShape]:
        return self._resource.methods

    # ------------------------------------------------------------------
    # Resource capabilities
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str = "GET",
        uri: str = "",
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        return await self._resource.request(method, uri, params=params, json=json)

    async def exists(self) -> bool:
        return await self._resource.exists()

    async def get(self) -> tuple[Job, dict[str, Any]]:
        return self, await self._resource.get()

    async def get_metadata(self) -> dict[str, Any]:
        return await self._resource.get_metadata()

    async def set_metadata(self, metadata: dict[str, Any]) -> dict[str, Any]:
        return await self._resource.set_metadata(metadata)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def cancel(self) -> dict[str, Any]:
        """Ask the service to cancel the job.

        Cancellation is asynchronous on the service side; poll to learn the
        job's final state.
        """
        params = {}
        if self._location:
            params["location"] = self._location
        logger.info("Requesting cancellation of job %s", self._id)
        return await self.request("POST", "/cancel", params=params)

    async def poll(self) -> dict[str, Any] | None:
        """Refresh metadata once and interpret the job's status.

        Returns:
            The metadata response itself when the job is ``DONE``, or ``None``
            while it is pending, running or in any other state.

        Raises:
            JobFailedError: The job's status carries errors, whatever its state.
        """
        metadata = await self.get_metadata()
        status = metadata.get("status") or {}

        if status.get("errors") is not None:
            logger.info("Job %s failed: %s", self._id, status.get("errorResult") or status["errors"])
            raise JobFailedError(status, response=metadata)

        if status.get("state") == JobState.DONE:
            logger.debug("Job %s is done", self._id)
            return metadata

        logger.debug("Job %s not complete (state=%s)", self._id, status.get("state"))
        return None

    # ------------------------------------------------------------------
    # Query results
    # ------------------------------------------------------------------

    async def get_query_results(self, options: Mapping[str, Any] | None = None) -> QueryResultsPage:
        """Fetch one page of results for a query job.

        Args:
            options: Extra query parameters (``maxResults``, ``pageToken``,
                ``timeoutMs``, ``startIndex`` ...). ``location`` defaults to the
                job's location.

        Returns:
            The page. While the job is still running ``rows`` is ``None`` and
            ``next_query`` repeats the request unchanged.
        """
        options = dict(options or {})
        if options.get("location") is None:
            options["location"] = self._location

        response = await self._warehouse.request(
            "GET",
            f"/queries/{self._id}",
            params=paginator.wire_params(options),
        )

        if response.get("jobComplete") is False:
            return QueryResultsPage(rows=None, next_query=dict(options), response=response)

        rows = response.get("rows")
        if rows is None:
            rows = []
        if response.get("schema") is not None:
            rows = self._warehouse.merge_schema_with_rows(response["schema"], rows)

        next_query = None
        if response.get("pageToken"):
            next_query = {**options, "pageToken": response["pageToken"]}

        return QueryResultsPage(rows=rows, next_query=next_query, response=response)

    async def _get_query_results_as_stream(self, options: Mapping[str, Any]) -> QueryResultsPage:
        return await self.get_query_results({**options, "autoPaginate": False})

    def get_query_results_stream(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        incomplete_delay: float | None = None,
    ) -> AsyncIterator[Any]:
        """Iterate over result rows lazily, fetching one page at a time."""
        if incomplete_delay is None:
            incomplete_delay = self._warehouse.settings.poll_interval
        return paginator.stream_rows(
            self._get_query_results_as_stream,
            options,
            incomplete_delay=incomplete_delay,
        )

    async def get_all_query_results(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        incomplete_delay: float | None = None,
    ) -> list[Any]:
        """Fetch every page and return all rows."""
        if incomplete_delay is None:
            incomplete_delay = self._warehouse.settings.poll_interval
        return await paginator.collect_rows(
            self._get_query_results_as_stream,
            options,
            incomplete_delay=incomplete_delay,
        )
