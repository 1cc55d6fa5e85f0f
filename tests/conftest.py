"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from adminflow.core.config import AdminflowConfig, EngineConfig, StorageConfig
from adminflow.reports.history import ReportHistoryService
from adminflow.storage.backend import InMemoryBackend
from adminflow.workflow.engine import WorkflowEngine
from adminflow.workflow.executors import ExecutorRegistry
from adminflow.workflow.models import Workflow, WorkflowStep


class TickingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2025, 1, 1, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


async def ok_executor(step: WorkflowStep) -> dict[str, Any]:
    return {"step": step.id, "ok": True}


async def failing_executor(step: WorkflowStep) -> dict[str, Any]:
    raise RuntimeError(f"{step.id} exploded")


def make_workflow(*steps: WorkflowStep, workflow_id: str = "wf-1") -> Workflow:
    return Workflow(id=workflow_id, name="Client onboarding", steps=list(steps))


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def registry() -> ExecutorRegistry:
    """Deterministic executors: `ok` succeeds, `boom` raises."""
    return ExecutorRegistry({"ok": ok_executor, "boom": failing_executor})


@pytest.fixture
def engine(registry: ExecutorRegistry, clock: TickingClock) -> WorkflowEngine:
    return WorkflowEngine(registry, clock=clock)


@pytest.fixture
def history(backend: InMemoryBackend, clock: TickingClock) -> ReportHistoryService:
    return ReportHistoryService(backend, clock=clock)


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    """Provide a temporary state directory."""
    state_dir = tmp_path / ".adminflow"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def config(temp_state_dir: Path) -> AdminflowConfig:
    """Configuration with file storage in a temp dir and instant simulated steps."""
    return AdminflowConfig(
        log_level="DEBUG",
        storage=StorageConfig(backend="file", path=temp_state_dir),
        engine=EngineConfig(simulated_latency_scale=0.0, simulated_failure_rate=0.0),
    )
