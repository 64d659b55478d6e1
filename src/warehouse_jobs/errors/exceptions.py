"""Custom exception classes for the warehouse jobs client."""

from __future__ import annotations

from typing import Any

import httpx


class WarehouseError(Exception):
    """Base exception for warehouse_jobs."""

    def __init__(self, code: str, message: str, details=None, status_code: int | None = None):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ApiError(WarehouseError):
    """Uniform error built from a service error body or a job ``status`` object.

    The service reports request failures as ``{"error": {"code", "message", "errors"}}``
    and job failures as ``status`` objects carrying ``errorResult`` and ``errors``.
    Both shapes are accepted here.
    """

    def __init__(self, body: dict[str, Any] | str, response: Any = None):
        if isinstance(body, str):
            body = {"message": body}

        self.body = body
        self.response = response
        self.errors: list[dict[str, Any]] = list(body.get("errors") or [])

        error_result = body.get("errorResult") or {}
        reasons = [e.get("reason") for e in self.errors if isinstance(e, dict) and e.get("reason")]
        code = error_result.get("reason") or (reasons[0] if reasons else "API_ERROR")

        status_code = body.get("code")
        if not isinstance(status_code, int):
            status_code = None

        super().__init__(code, _build_message(body, self.errors), self.errors or None, status_code)

    @classmethod
    def from_response(cls, response: httpx.Response) -> ApiError:
        """Build an error from a non-2xx HTTP response."""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            body = dict(payload["error"])
        else:
            body = {"message": response.text or response.reason_phrase}
        body.setdefault("code", response.status_code)
        return cls(body, response=payload if payload is not None else response.text)


class JobFailedError(ApiError):
    """The job ran on the service and finished with errors."""


class JobTimeoutError(WarehouseError):
    """A job did not reach ``DONE`` before the caller's deadline."""

    def __init__(self, job_id: str, timeout: float):
        super().__init__(
            "JOB_TIMEOUT",
            f"Job '{job_id}' did not complete within {timeout:g}s",
            {"job_id": job_id, "timeout": timeout},
        )


class UnsupportedCapabilityError(WarehouseError):
    """A resource was asked for a capability it does not declare."""

    def __init__(self, capability: str, resource: str):
        super().__init__(
            "UNSUPPORTED_CAPABILITY",
            f"{resource} does not support '{capability}'",
        )


def _build_message(body: dict[str, Any], errors: list[dict[str, Any]]) -> str:
    if body.get("message"):
        return str(body["message"])
    error_result = body.get("errorResult") or {}
    if error_result.get("message"):
        return str(error_result["message"])
    messages = [str(e["message"]) for e in errors if isinstance(e, dict) and e.get("message")]
    if messages:
        return "; ".join(messages)
    return "Error during request."
