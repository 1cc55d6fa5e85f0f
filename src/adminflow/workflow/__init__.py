"""Workflow execution.

- models: workflows, steps and their statuses
- executors: step-type dispatch and the integration client contract
- engine: the single-pass dependency-gated sweep
- ordering: topological ordering helper for callers
- store: snapshot persistence
"""

from adminflow.workflow.engine import WorkflowEngine
from adminflow.workflow.executors import (
    ExecutorRegistry,
    IntegrationClient,
    SimulatedIntegrationClient,
    StepExecutor,
    build_executor_registry,
)
from adminflow.workflow.models import StepStatus, Workflow, WorkflowStatus, WorkflowStep
from adminflow.workflow.ordering import dependency_order
from adminflow.workflow.store import WorkflowStore

__all__ = [
    "ExecutorRegistry",
    "IntegrationClient",
    "SimulatedIntegrationClient",
    "StepExecutor",
    "StepStatus",
    "Workflow",
    "WorkflowEngine",
    "WorkflowStatus",
    "WorkflowStep",
    "WorkflowStore",
    "build_executor_registry",
    "dependency_order",
]
