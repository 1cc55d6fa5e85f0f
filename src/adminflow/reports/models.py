"""Report job records as persisted in the history blob."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from adminflow.reports.state_machine import STATES_WITH_REPORT, ReportStatus


class ReportHistoryItem(BaseModel):
    id: str
    workflow_name: str
    status: ReportStatus
    created_at: str
    updated_at: str | None = None

    progress: int = Field(default=0, ge=0, le=100)
    phase: str = ""
    report: dict[str, Any] | None = None
    error: str | None = None
    pdf_url: str | None = None

    @model_validator(mode="after")
    def _report_matches_status(self) -> ReportHistoryItem:
        has_report = self.report is not None
        if has_report != (self.status in STATES_WITH_REPORT):
            raise ValueError(
                "report must be set iff status is generated or pdf_created "
                f"(status={self.status.value})"
            )
        return self


class StorageInfo(BaseModel):
    total_reports: int
    storage_bytes: int
    storage_size: str
