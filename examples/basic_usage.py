#!/usr/bin/env python3
"""Programmatic workflow execution example.

This demonstrates using the adminflow components directly:

* load settings from `.env`
* run a small onboarding workflow against the simulated integrations
* record a report job in the persisted history and mark its PDF as created

Nothing here talks to an LLM; the report payload is built from the step results.
"""

from __future__ import annotations

import argparse
import asyncio
import random
from collections.abc import Sequence

from adminflow.bootstrap import build_engine, build_history
from adminflow.core.config import AdminflowConfig
from adminflow.workflow.models import Workflow, WorkflowStep
from adminflow.workflow.ordering import dependency_order


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a demo workflow (programmatic example).")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the simulated steps")
    parser.add_argument("--name", default="Client onboarding", help="Workflow name")
    return parser.parse_args(argv)


def _demo_workflow(name: str) -> Workflow:
    # Deliberately listed out of order; dependency_order fixes it.
    steps = [
        WorkflowStep(id="send-welcome", type="notification", dependencies=["draft-contract"]),
        WorkflowStep(id="fetch-crm", type="api", name="Fetch client from CRM"),
        WorkflowStep(id="classify", type="ai", dependencies=["fetch-crm"]),
        WorkflowStep(id="approve", type="decision", dependencies=["classify"]),
        WorkflowStep(
            id="draft-contract",
            type="document",
            dependencies=["approve"],
            config={"document_type": "contract"},
        ),
    ]
    return Workflow(id="demo-onboarding", name=name, steps=dependency_order(steps))


async def _run(config: AdminflowConfig, name: str, seed: int | None) -> int:
    backend = config.create_backend()
    engine = build_engine(config, backend, rng=random.Random(seed))
    history = build_history(config, backend)

    workflow = _demo_workflow(name)
    engine.add_workflow(workflow)
    await engine.execute_workflow(workflow.id)

    for step in workflow.steps:
        print(f"{step.id:<16} {step.status.value:<10} {step.duration or 0:>8.0f} ms")
    print(f"Workflow {workflow.status.value} ({workflow.progress:.0f}%)")

    report = {
        "title": f"{workflow.name} run summary",
        "sections": [
            {"title": step.name or step.id, "content": step.error or "completed"}
            for step in workflow.steps
        ],
    }
    report_id = history.save_report(report, workflow.name)
    history.update_report_status(report_id, "pdf_created", pdf_url=f"file://{report_id}.pdf")

    info = history.get_storage_info()
    print(f"Saved {report_id}; history holds {info.total_reports} report(s), {info.storage_size}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    config = AdminflowConfig()
    config.setup_logging()

    return asyncio.run(_run(config, args.name, args.seed))


if __name__ == "__main__":
    raise SystemExit(main())
