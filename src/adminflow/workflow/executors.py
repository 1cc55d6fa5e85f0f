"""Step executors keyed by step type.

An executor is an async callable `(step) -> result`. The engine only relies on
"returns a result or raises"; what a step actually does is delegated to an
integration client, so production code can perform real calls while tests script
results.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Iterator
from datetime import UTC, datetime
from typing import Any, Protocol

from adminflow.workflow.models import WorkflowStep

logger = logging.getLogger(__name__)

StepExecutor = Callable[[WorkflowStep], Awaitable[Any]]
Sleep = Callable[[float], Awaitable[None]]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class IntegrationClient(Protocol):
    """One capability per built-in step type."""

    async def call_api(self, step: WorkflowStep) -> dict[str, Any]: ...

    async def run_ai(self, step: WorkflowStep) -> dict[str, Any]: ...

    async def decide(self, step: WorkflowStep) -> dict[str, Any]: ...

    async def notify(self, step: WorkflowStep) -> dict[str, Any]: ...

    async def generate_document(self, step: WorkflowStep) -> dict[str, Any]: ...


class ExecutorRegistry:
    """Mapping of step type to executor, extensible after construction."""

    def __init__(self, executors: dict[str, StepExecutor] | None = None) -> None:
        self._executors: dict[str, StepExecutor] = dict(executors or {})

    def register(self, step_type: str, executor: StepExecutor) -> None:
        if step_type in self._executors:
            logger.debug("Replacing step executor", extra={"step_type": step_type})
        self._executors[step_type] = executor

    def get(self, step_type: str) -> StepExecutor | None:
        return self._executors.get(step_type)

    def types(self) -> list[str]:
        return sorted(self._executors)

    def __contains__(self, step_type: object) -> bool:
        return step_type in self._executors

    def __iter__(self) -> Iterator[str]:
        return iter(self._executors)

    def __len__(self) -> int:
        return len(self._executors)


def build_executor_registry(client: IntegrationClient) -> ExecutorRegistry:
    """Bind the built-in step types to an integration client."""

    return ExecutorRegistry(
        {
            "api": client.call_api,
            "ai": client.run_ai,
            "decision": client.decide,
            "notification": client.notify,
            "document": client.generate_document,
        }
    )


class SimulatedIntegrationClient:
    """Demo integrations with randomized latency and results.

    Pass a seeded `random.Random` and a no-op `sleep` (or `latency_scale=0`) for
    deterministic runs.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        latency_scale: float = 1.0,
        failure_rate: float = 0.1,
    ) -> None:
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._latency_scale = latency_scale
        self._failure_rate = failure_rate

    async def _wait(self, low: float, high: float | None = None) -> None:
        seconds = low if high is None else self._rng.uniform(low, high)
        seconds *= self._latency_scale
        if seconds > 0:
            await self._sleep(seconds)

    def _token(self, length: int = 11) -> str:
        return "".join(self._rng.choice(_BASE36) for _ in range(length))

    async def call_api(self, step: WorkflowStep) -> dict[str, Any]:
        await self._wait(0.5, 2.5)
        if self._rng.random() < self._failure_rate:
            raise ConnectionError("API call failed: Connection timeout")
        return {
            "success": True,
            "data": {"id": self._token(), "timestamp": datetime.now(tz=UTC).isoformat()},
            "response_time": self._rng.uniform(200, 1200),
        }

    async def run_ai(self, step: WorkflowStep) -> dict[str, Any]:
        await self._wait(1.0, 4.0)
        return {
            "confidence": self._rng.uniform(0.7, 1.0),
            "result": "Processed successfully",
            "extracted_data": {
                "entities": ["Customer Name", "Project Details", "Timeline"],
                "sentiment": "positive",
            },
        }

    async def decide(self, step: WorkflowStep) -> dict[str, Any]:
        await self._wait(0.2)
        return {
            "decision": "approve" if self._rng.random() > 0.5 else "review",
            "confidence": self._rng.uniform(0.6, 1.0),
            "reasoning": "Based on historical data and current parameters",
        }

    async def notify(self, step: WorkflowStep) -> dict[str, Any]:
        await self._wait(0.3)
        return {
            "sent": True,
            "channel": "email" if self._rng.random() > 0.5 else "slack",
            "recipients": self._rng.randint(1, 5),
        }

    async def generate_document(self, step: WorkflowStep) -> dict[str, Any]:
        await self._wait(1.5, 4.0)
        return {
            "document_id": self._token(),
            "type": step.config.get("document_type", "contract"),
            "pages": self._rng.randint(1, 10),
            "generated": True,
        }
