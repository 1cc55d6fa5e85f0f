"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field

from adminflow.workflow.models import Workflow


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    workflows: int
    reports: int


class CreateWorkflowRequest(BaseModel):
    workflow: Workflow
    sort_steps: bool = Field(
        default=False,
        description="Reorder steps so dependencies come first before registering",
    )


class PdfCreatedRequest(BaseModel):
    pdf_url: str | None = None
