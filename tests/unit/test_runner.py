"""Unit tests for the report generation runner."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from adminflow.reports.history import ReportHistoryService
from adminflow.reports.runner import (
    CANCELLED_MESSAGE,
    ProgressCallback,
    run_report_generation,
    start_report_generation,
)
from adminflow.reports.state_machine import ReportStatus


class ScriptedService:
    """Generation service that reports fixed progress steps."""

    def __init__(
        self,
        steps: list[tuple[float, str]],
        *,
        error: Exception | None = None,
        history: ReportHistoryService | None = None,
    ) -> None:
        self.steps = steps
        self.error = error
        self.history = history
        self.seen: list[tuple[ReportStatus, int, str]] = []

    async def generate(self, workflow_name: str, on_progress: ProgressCallback) -> dict[str, Any]:
        for progress, phase in self.steps:
            on_progress(progress, phase)
            if self.history is not None:
                item = self.history.get_history()[0]
                self.seen.append((item.status, item.progress, item.phase))
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return {"title": f"{workflow_name} report", "sections": []}


@pytest.mark.asyncio
async def test_successful_generation_completes_job(history: ReportHistoryService) -> None:
    service = ScriptedService([(10, "Fetching data"), (60, "Writing sections")], history=history)

    report_id = await run_report_generation(history, service, "Onboarding")

    assert service.seen == [
        (ReportStatus.GENERATING, 10, "Fetching data"),
        (ReportStatus.GENERATING, 60, "Writing sections"),
    ]
    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.GENERATED
    assert item.progress == 100
    assert item.report == {"title": "Onboarding report", "sections": []}


@pytest.mark.asyncio
async def test_progress_is_held_below_completion(history: ReportHistoryService) -> None:
    service = ScriptedService([(100, "Almost there")], history=history)

    await run_report_generation(history, service, "Onboarding")

    assert service.seen == [(ReportStatus.GENERATING, 99, "Almost there")]


@pytest.mark.asyncio
async def test_generation_error_marks_job_failed(history: ReportHistoryService) -> None:
    service = ScriptedService([(20, "Calling model")], error=RuntimeError("rate limited"))

    report_id = await run_report_generation(history, service, "Onboarding")

    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.FAILED
    assert item.error == "rate limited"
    assert item.report is None


@pytest.mark.asyncio
async def test_cancel_event_aborts_at_next_progress(history: ReportHistoryService) -> None:
    cancel = asyncio.Event()
    cancel.set()
    service = ScriptedService([(20, "Calling model")])

    report_id = await run_report_generation(history, service, "Onboarding", cancel_event=cancel)

    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.FAILED
    assert item.error == CANCELLED_MESSAGE


@pytest.mark.asyncio
async def test_cancel_after_last_progress_still_fails_job(history: ReportHistoryService) -> None:
    cancel = asyncio.Event()

    class CancelsAtEnd(ScriptedService):
        async def generate(self, workflow_name: str, on_progress: ProgressCallback):
            result = await super().generate(workflow_name, on_progress)
            cancel.set()
            return result

    report_id = await run_report_generation(
        history, CancelsAtEnd([(50, "Writing")]), "Onboarding", cancel_event=cancel
    )

    assert history.get_report(report_id).status == ReportStatus.FAILED  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_start_report_generation_creates_pending_job_first(
    history: ReportHistoryService,
) -> None:
    service = ScriptedService([(30, "Working")])

    report_id, task = start_report_generation(history, service, "Onboarding")
    assert history.get_report(report_id).status == ReportStatus.PENDING  # type: ignore[union-attr]

    assert await task == report_id
    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.GENERATED
    assert len(history.get_history()) == 1


@pytest.mark.asyncio
async def test_task_cancellation_marks_job_failed(history: ReportHistoryService) -> None:
    started = asyncio.Event()

    class Hangs:
        async def generate(self, workflow_name: str, on_progress: ProgressCallback):
            started.set()
            await asyncio.Event().wait()

    report_id, task = start_report_generation(history, Hangs(), "Onboarding")
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.FAILED
    assert item.error == CANCELLED_MESSAGE


@pytest.mark.parametrize("payload", [None, ["not", "a", "dict"]])
@pytest.mark.asyncio
async def test_unusable_payload_marks_job_failed(
    history: ReportHistoryService, payload: Any
) -> None:
    class ReturnsPayload:
        async def generate(self, workflow_name: str, on_progress: ProgressCallback):
            on_progress(50, "half")
            return payload

    report_id = await run_report_generation(history, ReturnsPayload(), "Onboarding")

    item = history.get_report(report_id)
    assert item is not None
    assert item.status == ReportStatus.FAILED
    assert item.report is None
    assert item.error


@pytest.mark.asyncio
async def test_job_deleted_mid_run_does_not_raise(history: ReportHistoryService) -> None:
    class DeletesOwnJob:
        async def generate(self, workflow_name: str, on_progress: ProgressCallback):
            on_progress(10, "Starting")
            history.delete_report(history.get_history()[0].id)
            on_progress(50, "Writing")
            return {"title": "t"}

    report_id = await run_report_generation(history, DeletesOwnJob(), "Onboarding")

    assert history.get_report(report_id) is None
    assert history.get_history() == []


@pytest.mark.asyncio
async def test_history_cleared_before_completion_does_not_raise(
    history: ReportHistoryService,
) -> None:
    class ClearsHistory:
        async def generate(self, workflow_name: str, on_progress: ProgressCallback):
            history.clear_history()
            return {"title": "t"}

    report_id = await run_report_generation(history, ClearsHistory(), "Onboarding")

    assert history.get_report(report_id) is None
