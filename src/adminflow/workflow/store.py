"""Workflow snapshot persistence.

Workflows are kept as one JSON list under a fixed key so a restarted process (or a
history UI) can inspect the last known state of each execution.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from adminflow.storage.backend import PersistenceBackend
from adminflow.workflow.models import Workflow

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOWS_KEY = "adminflow_workflows"


class WorkflowStore:
    def __init__(self, backend: PersistenceBackend, key: str = DEFAULT_WORKFLOWS_KEY) -> None:
        self._backend = backend
        self._key = key

    def load(self) -> list[Workflow]:
        stored = self._backend.get(self._key)
        if not stored:
            return []
        try:
            raw = json.loads(stored)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable workflow snapshots", extra={"key": self._key})
            return []
        if not isinstance(raw, list):
            return []

        workflows: list[Workflow] = []
        for item in raw:
            try:
                workflows.append(Workflow.model_validate(item))
            except ValidationError:
                logger.warning("Skipping invalid workflow snapshot", extra={"key": self._key})
        return workflows

    def save(self, workflows: list[Workflow]) -> None:
        payload = [w.model_dump(mode="json") for w in workflows]
        self._backend.set(self._key, json.dumps(payload, ensure_ascii=False))

    def get(self, workflow_id: str) -> Workflow | None:
        for workflow in self.load():
            if workflow.id == workflow_id:
                return workflow
        return None

    def upsert(self, workflow: Workflow) -> None:
        workflows = self.load()
        for idx, existing in enumerate(workflows):
            if existing.id == workflow.id:
                workflows[idx] = workflow
                break
        else:
            workflows.append(workflow)
        self.save(workflows)

    def delete(self, workflow_id: str) -> None:
        self.save([w for w in self.load() if w.id != workflow_id])
