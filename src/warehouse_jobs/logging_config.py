"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from warehouse_jobs.job import Job


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: If True, output JSON. If False, colored console output.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    # stdout carries command output, logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


_JOB_CONTEXT_KEYS = ("job_id", "location", "project_id")


def job_context_vars(job: Job) -> dict[str, str]:
    """Identity fields of *job* worth attaching to every log line."""
    ctx = {"job_id": job.id}
    if job.location:
        ctx["location"] = job.location
    project_id = getattr(job.warehouse, "project_id", None)
    if project_id:
        ctx["project_id"] = project_id
    return ctx


def bind_job_context(job: Job) -> None:
    """Bind *job*'s identity to the current async context."""
    structlog.contextvars.bind_contextvars(**job_context_vars(job))


def clear_job_context() -> None:
    """Drop job identity, leaving any caller-bound context in place."""
    structlog.contextvars.unbind_contextvars(*_JOB_CONTEXT_KEYS)
