"""Workflow and step models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStep(BaseModel):
    """A single unit of work, dispatched to an executor by `type`.

    `dependencies` holds ids of steps in the same workflow that must be completed
    before this one may run.
    """

    id: str
    type: str  # noqa: A003 (executor dispatch key)
    name: str | None = None
    status: StepStatus = StepStatus.PENDING
    dependencies: list[str] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)

    data: Any = None
    error: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float | None = Field(default=None, description="Milliseconds")


class Workflow(BaseModel):
    id: str
    name: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    progress: float = Field(default=0.0, ge=0.0, le=100.0)
    steps: list[WorkflowStep] = Field(default_factory=list)
    estimated_duration: int = Field(default=0, ge=0, description="Minutes")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def step(self, step_id: str) -> WorkflowStep | None:
        for s in self.steps:
            if s.id == step_id:
                return s
        return None

    def completed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)
