"""Command line entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from adminflow import __version__
from adminflow.bootstrap import build_engine, build_history
from adminflow.core.config import AdminflowConfig
from adminflow.core.errors import NotFoundError, ReportNotFoundError, WorkflowDefinitionError
from adminflow.reports.history import ReportHistoryService
from adminflow.reports.state_machine import ReportStatus
from adminflow.workflow.models import Workflow, WorkflowStatus
from adminflow.workflow.ordering import dependency_order

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_RUN_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adminflow",
        description="Run automation workflows and inspect report generation history",
    )
    parser.add_argument("--version", action="version", version=f"adminflow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run-workflow", help="Execute a workflow definition file")
    run.add_argument("path", type=Path, help="JSON file holding one workflow")
    run.add_argument(
        "--sort",
        action="store_true",
        help="Reorder steps so dependencies come first (otherwise the file order is used)",
    )

    history = subparsers.add_parser("history", help="List report generation jobs")
    history.add_argument("--workflow", default=None, help="Only jobs for this workflow name")
    history.add_argument("--limit", type=int, default=10, help="Maximum number of jobs to show")

    subparsers.add_parser("storage-info", help="Show report history size")
    subparsers.add_parser("clear-history", help="Delete all report history")

    generate = subparsers.add_parser(
        "generate-report", help="Generate a report with the configured LLM provider"
    )
    generate.add_argument("workflow_name", help="Workflow the report is about")

    serve = subparsers.add_parser("serve", help="Start the REST API")
    serve.add_argument("--host", default=None, help="Bind address (default from config)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default from config)")

    return parser


def _load_workflow(path: Path, *, sort: bool) -> Workflow:
    workflow = Workflow.model_validate_json(path.read_text(encoding="utf-8"))
    if sort:
        workflow = workflow.model_copy(update={"steps": dependency_order(workflow.steps)})
    return workflow


def _print_history(history: ReportHistoryService, workflow: str | None, limit: int) -> None:
    items = history.get_reports_by_workflow(workflow) if workflow else history.get_history()
    for item in items[: max(limit, 0)]:
        line = f"{item.id}  {item.status.value:<11}  {item.progress:>3}%  {item.workflow_name}"
        if item.error:
            line += f"  ({item.error})"
        print(line)
    if not items:
        print("No reports")


def _run_workflow(config: AdminflowConfig, path: Path, *, sort: bool) -> int:
    backend = config.create_backend()
    engine = build_engine(config, backend)
    workflow = _load_workflow(path, sort=sort)
    engine.add_workflow(workflow)

    asyncio.run(engine.execute_workflow(workflow.id))

    for step in workflow.steps:
        suffix = f": {step.error}" if step.error else ""
        print(f"  {step.id:<24} {step.status.value}{suffix}")
    print(f"Workflow {workflow.id} {workflow.status.value} ({workflow.progress:.0f}%)")
    return EXIT_OK if workflow.status == WorkflowStatus.COMPLETED else EXIT_RUN_FAILED


def _generate_report(config: AdminflowConfig, workflow_name: str) -> int:
    from adminflow.llm.factory import LLMFactory
    from adminflow.llm.generation import LLMReportGenerator
    from adminflow.reports.runner import run_report_generation

    history = build_history(config, config.create_backend())
    generator = LLMReportGenerator(
        LLMFactory.create(config.llm), max_tokens=config.llm.max_tokens
    )
    report_id = asyncio.run(run_report_generation(history, generator, workflow_name))

    item = history.get_report(report_id)
    if item is None:
        raise ReportNotFoundError(report_id)
    print(f"Report {report_id} {item.status.value}")
    return EXIT_OK if item.status == ReportStatus.GENERATED else EXIT_RUN_FAILED


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AdminflowConfig()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    config.setup_logging()

    try:
        if args.command == "run-workflow":
            return _run_workflow(config, args.path, sort=args.sort)

        if args.command == "history":
            history = build_history(config, config.create_backend())
            _print_history(history, args.workflow, args.limit)
            return EXIT_OK

        if args.command == "storage-info":
            info = build_history(config, config.create_backend()).get_storage_info()
            print(json.dumps(info.model_dump(), indent=2))
            return EXIT_OK

        if args.command == "clear-history":
            build_history(config, config.create_backend()).clear_history()
            print("Report history cleared")
            return EXIT_OK

        if args.command == "generate-report":
            return _generate_report(config, args.workflow_name)

        if args.command == "serve":
            import uvicorn

            from adminflow.server.app import create_app

            uvicorn.run(
                create_app(config),
                host=args.host or config.server.host,
                port=args.port or config.server.port,
            )
            return EXIT_OK

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except (ValidationError, WorkflowDefinitionError, FileNotFoundError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    except NotFoundError as e:
        print(str(e), file=sys.stderr)
        return EXIT_NOT_FOUND

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
