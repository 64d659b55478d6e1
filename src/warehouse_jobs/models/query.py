"""Value types produced by query-results pagination."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryResultsPage:
    """One page of query results.

    ``rows`` is ``None`` while the job is still running. ``next_query`` is the
    request to issue next (the same request again while incomplete, or the
    request for the following page), or ``None`` when no pages remain.
    ``response`` is the raw service body.
    """

    rows: list[Any] | None
    next_query: dict[str, Any] | None
    response: dict[str, Any]

    @property
    def job_complete(self) -> bool:
        return self.response.get("jobComplete") is not False

    @property
    def total_rows(self) -> int | None:
        total = self.response.get("totalRows")
        return int(total) if total is not None else None
