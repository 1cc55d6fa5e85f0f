"""Persisted report-generation job history.

Every job lives in one JSON list stored under a fixed key, most recent first. The
list is capped: new jobs are inserted at the head and the oldest entries are dropped
once the cap is exceeded. Jobs advance through the automaton in
`adminflow.reports.state_machine`; out-of-order calls raise `IllegalTransitionError`.

Reads and writes go straight to the injected backend on every call, so several
service instances over the same backend see each other's writes (last writer wins).
"""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import ValidationError

from adminflow.core.errors import IllegalTransitionError, ReportNotFoundError
from adminflow.reports.models import ReportHistoryItem, StorageInfo
from adminflow.reports.state_machine import ReportStatus, is_terminal, transition
from adminflow.storage.backend import PersistenceBackend

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "adminflow_report_history"
DEFAULT_MAX_REPORTS = 50

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

ProgressStatus = Literal["generating", "generated", "failed"]
PdfStatus = Literal["generated", "pdf_created"]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ReportHistoryService:
    def __init__(
        self,
        backend: PersistenceBackend,
        *,
        max_reports: int = DEFAULT_MAX_REPORTS,
        key: str = DEFAULT_HISTORY_KEY,
        clock: Callable[[], datetime] = _utc_now,
        rng: random.Random | None = None,
    ) -> None:
        if max_reports <= 0:
            raise ValueError("max_reports must be positive")
        self._backend = backend
        self._max_reports = max_reports
        self._key = key
        self._clock = clock
        self._rng = rng or random.Random()

    @property
    def max_reports(self) -> int:
        return self._max_reports

    # -- creation -----------------------------------------------------------

    def create_pending_report(self, workflow_name: str) -> str:
        """Insert a `pending` job at the head of the history and return its id."""
        now = self._now_iso()
        item = ReportHistoryItem(
            id=self._generate_report_id(),
            workflow_name=workflow_name,
            status=ReportStatus.PENDING,
            created_at=now,
            updated_at=now,
            progress=0,
            phase="Initializing...",
        )
        self._insert(item)
        logger.info(
            "Pending report created",
            extra={"report_id": item.id, "workflow_name": workflow_name},
        )
        return item.id

    def save_report(self, report: dict[str, Any], workflow_name: str) -> str:
        """Record an already generated report in one step."""
        now = self._now_iso()
        item = ReportHistoryItem(
            id=self._generate_report_id(),
            workflow_name=workflow_name,
            status=ReportStatus.GENERATED,
            created_at=now,
            updated_at=now,
            progress=100,
            phase="Complete",
            report=report,
        )
        self._insert(item)
        logger.info("Report saved", extra={"report_id": item.id, "workflow_name": workflow_name})
        return item.id

    # -- transitions --------------------------------------------------------

    def update_report_progress(
        self,
        report_id: str,
        progress: float,
        phase: str,
        status: ProgressStatus | None = None,
    ) -> ReportHistoryItem:
        """Update progress/phase in place, optionally moving the job along the automaton.

        `status="generated"` is only accepted on a job that is already generated (it
        relabels the phase after `complete_report`); use `complete_report` to attach
        the report payload. Progress of a generated job stays at 100.
        """
        if not 0 <= progress <= 100:
            raise ValueError(f"progress must be within [0, 100], got {progress}")

        def apply(item: ReportHistoryItem) -> dict[str, object]:
            updates: dict[str, object] = {"progress": round(progress), "phase": phase}
            if status is None:
                if is_terminal(item.status):
                    raise IllegalTransitionError(
                        f"Cannot update progress of a {item.status.value} report"
                    )
            elif status == ReportStatus.GENERATED and item.status != ReportStatus.GENERATED:
                raise IllegalTransitionError(
                    f"Illegal transition: {item.status.value} -> generated without a report"
                )
            else:
                updates["status"] = transition(current=item.status, to=ReportStatus(status))
            # A generated job already holds its full report.
            if item.status == ReportStatus.GENERATED:
                updates["progress"] = 100
            return updates

        return self._mutate(report_id, apply)

    def complete_report(self, report_id: str, report: dict[str, Any]) -> ReportHistoryItem:
        def apply(item: ReportHistoryItem) -> dict[str, object]:
            return {
                "status": transition(current=item.status, to=ReportStatus.GENERATED),
                "report": report,
                "progress": 100,
                "phase": "Complete",
            }

        updated = self._mutate(report_id, apply)
        logger.info("Report completed", extra={"report_id": report_id})
        return updated

    def mark_report_failed(self, report_id: str, error: str) -> ReportHistoryItem:
        def apply(item: ReportHistoryItem) -> dict[str, object]:
            return {
                "status": transition(current=item.status, to=ReportStatus.FAILED),
                "error": error,
            }

        updated = self._mutate(report_id, apply)
        logger.warning("Report failed", extra={"report_id": report_id, "error": error})
        return updated

    def update_report_status(
        self, report_id: str, status: PdfStatus, pdf_url: str | None = None
    ) -> ReportHistoryItem:
        """Record the downstream PDF step on a generated report.

        `status="pdf_created"` moves a generated job to its terminal state;
        `status="generated"` keeps it generated and only attaches `pdf_url`.
        """

        def apply(item: ReportHistoryItem) -> dict[str, object]:
            updates: dict[str, object] = {
                "status": transition(current=item.status, to=ReportStatus(status))
            }
            if pdf_url:
                updates["pdf_url"] = pdf_url
            return updates

        updated = self._mutate(report_id, apply)
        logger.info("Report status updated", extra={"report_id": report_id, "status": status})
        return updated

    # -- reads --------------------------------------------------------------

    def get_history(self) -> list[ReportHistoryItem]:
        stored = self._backend.get(self._key)
        if not stored:
            return []
        try:
            raw = json.loads(stored)
        except json.JSONDecodeError:
            logger.error("Report history is not valid JSON; treating as empty")
            return []
        if not isinstance(raw, list):
            logger.error("Report history is not a list; treating as empty")
            return []

        items: list[ReportHistoryItem] = []
        for entry in raw:
            try:
                items.append(ReportHistoryItem.model_validate(entry))
            except ValidationError as e:
                logger.warning("Skipping invalid report history entry", extra={"error": str(e)})
        return items

    def get_report(self, report_id: str) -> ReportHistoryItem | None:
        for item in self.get_history():
            if item.id == report_id:
                return item
        return None

    def get_reports_by_workflow(self, workflow_name: str) -> list[ReportHistoryItem]:
        return [item for item in self.get_history() if item.workflow_name == workflow_name]

    def get_recent_reports(self, limit: int = 10) -> list[ReportHistoryItem]:
        if limit < 0:
            raise ValueError("limit must not be negative")
        return self.get_history()[:limit]

    def get_storage_info(self) -> StorageInfo:
        stored = self._backend.get(self._key) or ""
        size = len(stored.encode("utf-8"))
        return StorageInfo(
            total_reports=len(self.get_history()),
            storage_bytes=size,
            storage_size=f"{size / 1024 / 1024:.2f} MB",
        )

    # -- removal ------------------------------------------------------------

    def delete_report(self, report_id: str) -> None:
        history = self.get_history()
        remaining = [item for item in history if item.id != report_id]
        if len(remaining) == len(history):
            raise ReportNotFoundError(report_id)
        self._save(remaining)
        logger.info("Report deleted", extra={"report_id": report_id})

    def clear_history(self) -> None:
        self._backend.remove(self._key)
        logger.info("Report history cleared")

    # -- internals ----------------------------------------------------------

    def _insert(self, item: ReportHistoryItem) -> None:
        history = self.get_history()
        history.insert(0, item)
        dropped = len(history) - self._max_reports
        if dropped > 0:
            del history[self._max_reports :]
            logger.debug("Evicted oldest reports", extra={"count": dropped})
        self._save(history)

    def _mutate(
        self,
        report_id: str,
        apply: Callable[[ReportHistoryItem], dict[str, object]],
    ) -> ReportHistoryItem:
        history = self.get_history()
        for idx, item in enumerate(history):
            if item.id != report_id:
                continue
            updates = apply(item)
            merged = ReportHistoryItem.model_validate(
                {**item.model_dump(), **updates, "updated_at": self._now_iso()}
            )
            history[idx] = merged
            self._save(history)
            return merged
        raise ReportNotFoundError(report_id)

    def _save(self, history: list[ReportHistoryItem]) -> None:
        payload = [item.model_dump(mode="json") for item in history]
        try:
            self._backend.set(self._key, json.dumps(payload, ensure_ascii=False))
        except Exception:
            logger.exception("Failed to save report history", extra={"key": self._key})
            raise

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def _generate_report_id(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        suffix = "".join(self._rng.choice(_BASE36) for _ in range(9))
        return f"report_{millis}_{suffix}"
