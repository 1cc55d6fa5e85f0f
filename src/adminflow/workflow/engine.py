"""Dependency-gated workflow execution.

`WorkflowEngine.execute_workflow` makes exactly one pass over a workflow's steps in
stored order. A step runs when all of its dependencies are already completed;
otherwise it is skipped and stays pending. Steps are awaited one at a time, never
concurrently, even when they are independent of each other.

Because the pass is single, a step whose dependency is listed *after* it never
becomes eligible. Callers must supply steps in a dependency-compatible order
(see `adminflow.workflow.ordering.dependency_order`).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from adminflow.core.errors import StepTimeoutError, WorkflowNotFoundError
from adminflow.workflow.executors import ExecutorRegistry, StepExecutor
from adminflow.workflow.models import (
    StepStatus,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
    utc_now,
)
from adminflow.workflow.store import WorkflowStore

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Owns workflows by id and executes them.

    Args:
        executors: Step executors keyed by step type.
        store: Optional snapshot store. Workflows already in it are loaded on
            construction; snapshots are written on registration, after each executed
            step and at both ends of a sweep.
        clock: Source of step timestamps.
        step_timeout: Seconds after which a running step is failed (None = no limit).
    """

    def __init__(
        self,
        executors: ExecutorRegistry,
        *,
        store: WorkflowStore | None = None,
        clock: Callable[[], datetime] = utc_now,
        step_timeout: float | None = None,
    ) -> None:
        self._executors = executors
        self._store = store
        self._clock = clock
        self._step_timeout = step_timeout
        self._workflows: dict[str, Workflow] = {}

        if store is not None:
            for workflow in store.load():
                self._workflows[workflow.id] = workflow
            if self._workflows:
                logger.info(
                    "Loaded workflow snapshots", extra={"count": len(self._workflows)}
                )

    @property
    def executors(self) -> ExecutorRegistry:
        return self._executors

    def add_workflow(self, workflow: Workflow) -> None:
        """Register (or replace) a workflow by id. The step graph is not validated."""
        self._workflows[workflow.id] = workflow
        self._persist(workflow)

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        return self._workflows.get(workflow_id)

    def get_all_workflows(self) -> list[Workflow]:
        return list(self._workflows.values())

    async def execute_workflow(
        self, workflow_id: str, *, cancel_event: asyncio.Event | None = None
    ) -> None:
        """Run one sweep over the workflow's steps.

        Step failures are recorded on the step and downgrade the workflow to
        `failed`; they are never raised. Setting `cancel_event` stops the sweep
        before the next step starts. The step in flight is allowed to finish.

        Raises:
            WorkflowNotFoundError: if no workflow is registered under `workflow_id`.
        """
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        workflow.status = WorkflowStatus.ACTIVE
        workflow.updated_at = self._clock()
        self._persist(workflow)
        logger.info(
            "Workflow sweep started",
            extra={"workflow_id": workflow.id, "steps": len(workflow.steps)},
        )

        for step in workflow.steps:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Workflow sweep cancelled", extra={"workflow_id": workflow.id})
                break
            if not self._can_execute(step, workflow):
                logger.debug(
                    "Step not eligible",
                    extra={"workflow_id": workflow.id, "step_id": step.id},
                )
                continue
            await self._execute_step(step, workflow)
            # Visible to pollers mid-sweep.
            self._update_progress(workflow)
            self._persist(workflow)

        self._update_progress(workflow)
        workflow.status = (
            WorkflowStatus.COMPLETED
            if workflow.completed_count() == len(workflow.steps)
            else WorkflowStatus.FAILED
        )
        workflow.updated_at = self._clock()
        self._persist(workflow)

        logger.info(
            "Workflow sweep finished",
            extra={
                "workflow_id": workflow.id,
                "status": workflow.status.value,
                "progress": workflow.progress,
            },
        )

    @staticmethod
    def _update_progress(workflow: Workflow) -> None:
        total = len(workflow.steps)
        workflow.progress = 100.0 * workflow.completed_count() / total if total else 100.0

    @staticmethod
    def _can_execute(step: WorkflowStep, workflow: Workflow) -> bool:
        for dep_id in step.dependencies:
            dep = workflow.step(dep_id)
            if dep is None or dep.status != StepStatus.COMPLETED:
                return False
        return True

    async def _execute_step(self, step: WorkflowStep, workflow: Workflow) -> None:
        step.status = StepStatus.RUNNING
        step.error = None
        step.start_time = self._clock()

        try:
            executor = self._executors.get(step.type)
            if executor is None:
                raise LookupError(f"No executor registered for step type '{step.type}'")
            result = await self._invoke(executor, step)
        except asyncio.CancelledError:
            step.status = StepStatus.FAILED
            step.error = "cancelled"
            raise
        except Exception as e:
            step.status = StepStatus.FAILED
            step.error = str(e) or type(e).__name__
            logger.warning(
                "Step failed",
                extra={
                    "workflow_id": workflow.id,
                    "step_id": step.id,
                    "step_type": step.type,
                    "error": step.error,
                },
            )
        else:
            step.data = result
            step.status = StepStatus.COMPLETED
        finally:
            step.end_time = self._clock()
            step.duration = (step.end_time - step.start_time).total_seconds() * 1000

    async def _invoke(self, executor: StepExecutor, step: WorkflowStep) -> object:
        if self._step_timeout is None:
            return await executor(step)
        try:
            return await asyncio.wait_for(executor(step), timeout=self._step_timeout)
        except TimeoutError as e:
            raise StepTimeoutError(f"Step timed out after {self._step_timeout:g}s") from e

    def _persist(self, workflow: Workflow) -> None:
        if self._store is not None:
            self._store.upsert(workflow)
