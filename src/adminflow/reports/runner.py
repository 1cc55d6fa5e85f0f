"""Drive a generation service and record the outcome in the report history.

The runner owns the job lifecycle: it creates the pending job, moves it to
`generating`, forwards progress callbacks, and finishes with `complete_report` or
`mark_report_failed`. Generation errors end up on the job record; they are never
raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from adminflow.core.errors import IllegalTransitionError, NotFoundError
from adminflow.reports.history import ReportHistoryService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]

CANCELLED_MESSAGE = "Generation cancelled"


class GenerationService(Protocol):
    """Produces the report payload for a workflow."""

    def generate(
        self, workflow_name: str, on_progress: ProgressCallback
    ) -> Awaitable[dict[str, Any]]: ...


class GenerationCancelled(Exception):
    """Raised from the progress callback once cancellation was requested."""


async def run_report_generation(
    history: ReportHistoryService,
    service: GenerationService,
    workflow_name: str,
    *,
    cancel_event: asyncio.Event | None = None,
    report_id: str | None = None,
) -> str:
    """Generate one report and return its job id.

    Args:
        history: Job store the outcome is written to.
        service: Generation service to await.
        workflow_name: Name recorded on the job and passed to the service.
        cancel_event: When set, the next progress callback aborts generation and the
            job is marked failed.
        report_id: Existing pending job to drive instead of creating a new one.
    """

    if report_id is None:
        report_id = history.create_pending_report(workflow_name)

    def _cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def on_progress(progress: float, phase: str) -> None:
        if _cancelled():
            raise GenerationCancelled
        # 100 is reserved for completion.
        clamped = min(max(progress, 0), 99)
        history.update_report_progress(report_id, clamped, phase, "generating")

    try:
        history.update_report_progress(report_id, 0, "Starting generation...", "generating")
        report = await service.generate(workflow_name, on_progress)
        if _cancelled():
            raise GenerationCancelled
        history.complete_report(report_id, report)
    except (GenerationCancelled, asyncio.CancelledError) as e:
        logger.warning("Report generation cancelled", extra={"report_id": report_id})
        _record_failure(history, report_id, CANCELLED_MESSAGE)
        if isinstance(e, asyncio.CancelledError):
            raise
    except Exception as e:
        logger.exception("Report generation failed", extra={"report_id": report_id})
        _record_failure(history, report_id, str(e) or type(e).__name__)

    return report_id


def _record_failure(history: ReportHistoryService, report_id: str, error: str) -> None:
    """Mark the job failed unless it was deleted or already finished meanwhile."""
    try:
        history.mark_report_failed(report_id, error)
    except (NotFoundError, IllegalTransitionError) as e:
        logger.warning(
            "Could not record report failure",
            extra={"report_id": report_id, "error": error, "reason": str(e)},
        )


def start_report_generation(
    history: ReportHistoryService,
    service: GenerationService,
    workflow_name: str,
    *,
    cancel_event: asyncio.Event | None = None,
) -> tuple[str, asyncio.Task[str]]:
    """Create the pending job now and run generation as a background task.

    Must be called from inside a running event loop.
    """

    report_id = history.create_pending_report(workflow_name)
    task = asyncio.create_task(
        run_report_generation(
            history,
            service,
            workflow_name,
            cancel_event=cancel_event,
            report_id=report_id,
        ),
        name=f"report-generation-{report_id}",
    )
    return report_id, task
