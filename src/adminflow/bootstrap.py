"""Wire configured components together.

Backends and services are built once at startup and passed down explicitly; there
are no module-level singletons.
"""

from __future__ import annotations

import random

from adminflow.core.config import AdminflowConfig
from adminflow.reports.history import ReportHistoryService
from adminflow.storage.backend import PersistenceBackend
from adminflow.workflow.engine import WorkflowEngine
from adminflow.workflow.executors import SimulatedIntegrationClient, build_executor_registry
from adminflow.workflow.store import WorkflowStore


def build_history(config: AdminflowConfig, backend: PersistenceBackend) -> ReportHistoryService:
    return ReportHistoryService(
        backend,
        max_reports=config.storage.max_reports,
        key=config.storage.report_history_key,
    )


def build_engine(
    config: AdminflowConfig,
    backend: PersistenceBackend,
    *,
    rng: random.Random | None = None,
) -> WorkflowEngine:
    """Engine over the simulated integrations, with snapshots in `backend`."""
    client = SimulatedIntegrationClient(
        rng,
        latency_scale=config.engine.simulated_latency_scale,
        failure_rate=config.engine.simulated_failure_rate,
    )
    return WorkflowEngine(
        build_executor_registry(client),
        store=WorkflowStore(backend, key=config.storage.workflows_key),
        step_timeout=config.engine.step_timeout_seconds,
    )
