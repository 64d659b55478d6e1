"""warehouse-jobs CLI: status, cancel, wait, results."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import httpx

from warehouse_jobs.errors.exceptions import WarehouseError


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _status(job, args: argparse.Namespace) -> None:
    from warehouse_jobs.models.job import JobMetadataView

    metadata = await job.get_metadata()
    view = JobMetadataView.model_validate(metadata)
    _print_json({
        "job_id": job.id,
        "location": job.location,
        "state": view.state,
        "failed": view.failed,
        "status": metadata.get("status"),
    })


async def _cancel(job, args: argparse.Namespace) -> None:
    _print_json(await job.cancel())


async def _wait(job, args: argparse.Namespace) -> None:
    from warehouse_jobs.operation import wait_for_completion

    metadata = await wait_for_completion(job, timeout=args.timeout)
    _print_json(metadata.get("status"))


async def _results(job, args: argparse.Namespace) -> None:
    options = {}
    if args.max_results is not None:
        options["maxResults"] = args.max_results
    if args.page_token:
        options["pageToken"] = args.page_token

    if args.all:
        _print_json({"rows": await job.get_all_query_results(options)})
        return

    page = await job.get_query_results(options)
    _print_json({
        "job_complete": page.job_complete,
        "rows": page.rows,
        "next_page_token": (page.next_query or {}).get("pageToken"),
        "total_rows": page.total_rows,
    })


async def _run(args: argparse.Namespace) -> None:
    from warehouse_jobs.service import Warehouse

    async with Warehouse(args.project, location=args.location) as warehouse:
        job = warehouse.job(args.job_id)
        await _COMMANDS[args.command](job, args)


_COMMANDS = {
    "status": _status,
    "cancel": _cancel,
    "wait": _wait,
    "results": _results,
}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="warehouse-jobs",
        description="Inspect, cancel and read results of data-warehouse jobs",
    )
    parser.add_argument("--project", help="Project ID (default: WAREHOUSE_PROJECT_ID)")
    parser.add_argument("--location", help="Job location (default: WAREHOUSE_LOCATION)")
    sub = parser.add_subparsers(dest="command")

    p_status = sub.add_parser("status", help="Show the job's current status")
    p_status.add_argument("job_id")

    p_cancel = sub.add_parser("cancel", help="Request cancellation of a job")
    p_cancel.add_argument("job_id")

    p_wait = sub.add_parser("wait", help="Poll until the job is done")
    p_wait.add_argument("job_id")
    p_wait.add_argument("--timeout", type=float, help="Give up after this many seconds")

    p_results = sub.add_parser("results", help="Fetch query results")
    p_results.add_argument("job_id")
    p_results.add_argument("--max-results", type=int, help="Rows per page")
    p_results.add_argument("--page-token", help="Resume from this page token")
    p_results.add_argument("--all", action="store_true", help="Fetch every page")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    from warehouse_jobs.config import settings
    from warehouse_jobs.logging_config import configure_logging

    configure_logging(settings.log_level, settings.log_json)

    try:
        asyncio.run(_run(args))
    except (WarehouseError, httpx.HTTPError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
