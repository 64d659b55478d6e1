"""Pydantic models for job metadata returned by the service."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorProto(BaseModel):
    """A single error entry in a job status."""

    model_config = ConfigDict(extra="allow")

    reason: str | None = None
    location: str | None = None
    message: str | None = None


class JobStatusView(BaseModel):
    """The ``status`` block of a job resource."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    state: str | None = None
    error_result: ErrorProto | None = Field(None, alias="errorResult")
    errors: list[ErrorProto] | None = None


class JobReference(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    project_id: str | None = Field(None, alias="projectId")
    job_id: str = Field(..., alias="jobId")
    location: str | None = None


class JobMetadataView(BaseModel):
    """Read-only view over one metadata snapshot.

    Polling hands back the raw response body; this model is for callers that
    want typed access to it.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str | None = None
    job_reference: JobReference | None = Field(None, alias="jobReference")
    status: JobStatusView = Field(default_factory=JobStatusView)
    statistics: dict[str, Any] | None = None

    @property
    def state(self) -> str | None:
        return self.status.state

    @property
    def failed(self) -> bool:
        return self.status.errors is not None
