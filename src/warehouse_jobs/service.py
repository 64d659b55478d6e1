"""Service root: owns the HTTP client and hands out job handles."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from warehouse_jobs.config import Settings, settings as default_settings
from warehouse_jobs.errors.exceptions import ApiError
from warehouse_jobs.job import Job
from warehouse_jobs.rows import merge_schema_with_rows

logger = logging.getLogger(__name__)


class Warehouse:
    """Async client for one project of the data-warehouse service.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (its base URL is
    ignored; request URIs are resolved against this object's ``base_url``).
    """

    merge_schema_with_rows = staticmethod(merge_schema_with_rows)

    def __init__(
        self,
        project_id: str | None = None,
        *,
        location: str | None = None,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.project_id = project_id or self.settings.project_id
        if not self.project_id:
            raise ValueError("A project id is required (argument or WAREHOUSE_PROJECT_ID)")
        self.location = location or self.settings.location
        self.base_url = f"{self.settings.api_endpoint.rstrip('/')}/projects/{self.project_id}"
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> Warehouse:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.settings.auth_headers,
                timeout=self.settings.request_timeout,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        uri: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Perform one exchange with the service and return the decoded body.

        ``None`` param values mean "unset" and are left out of the query string.

        Raises:
            ApiError: the service answered with a non-2xx status.
            httpx.HTTPError: the exchange itself failed.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        url = f"{self.base_url}{uri}"
        logger.debug("%s %s params=%s", method, url, query)

        response = await self._get_client().request(method, url, params=query, json=json)
        if response.is_error:
            logger.warning("%s %s returned %s", method, uri, response.status_code)
            raise ApiError.from_response(response)
        if not response.content:
            return {}
        return response.json()

    def job(self, job_id: str, location: str | None = None) -> Job:
        """Return a handle for an existing job. No request is made."""
        return Job(self, job_id, location=location or self.location)
