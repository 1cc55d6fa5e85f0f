"""LLM-backed report generation.

Builds a report section by section so progress can be reported between calls.
Provider calls block, so each one runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from adminflow.llm.provider import LLMProvider
from adminflow.reports.runner import ProgressCallback

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS: tuple[str, ...] = (
    "Executive Summary",
    "Current Process Analysis",
    "Automation Opportunities",
    "ROI & Cost Analysis",
    "Implementation Roadmap",
)

SYSTEM_PROMPT = (
    "You write concise, professional sections of business automation reports. "
    "Answer with the section body only, without repeating the section title."
)


class LLMReportGenerator:
    """`GenerationService` that asks an LLM provider for one section at a time."""

    def __init__(
        self,
        provider: LLMProvider,
        sections: Sequence[str] = DEFAULT_SECTIONS,
        *,
        max_tokens: int | None = None,
    ) -> None:
        if not sections:
            raise ValueError("At least one section is required")
        self._provider = provider
        self._sections = list(sections)
        self._max_tokens = max_tokens

    def _prompt(self, workflow_name: str, title: str) -> str:
        return (
            f"Write the '{title}' section of an automation report for the workflow "
            f"'{workflow_name}'."
        )

    async def generate(
        self, workflow_name: str, on_progress: ProgressCallback
    ) -> dict[str, Any]:
        total = len(self._sections)
        generated: list[dict[str, str]] = []

        for index, title in enumerate(self._sections):
            on_progress(
                round(100 * index / total),
                f"Generating section {index + 1} of {total}: {title}",
            )
            content = await asyncio.to_thread(
                self._provider.complete,
                self._prompt(workflow_name, title),
                system=SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
            )
            generated.append({"title": title, "content": content.strip()})
            logger.debug(
                "Section generated",
                extra={"workflow_name": workflow_name, "section": title},
            )

        return {
            "title": f"{workflow_name} Automation Report",
            "sections": generated,
            "metadata": {
                "generated_at": datetime.now(tz=UTC).isoformat(),
                "sections_generated": len(generated),
                "total_sections": total,
            },
        }
