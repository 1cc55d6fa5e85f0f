"""FastAPI app factory.

Endpoints are thin wrappers over the workflow engine and the report history.
Failures of individual steps or jobs are reported as status fields on the returned
records, not as HTTP errors.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adminflow import __version__
from adminflow.bootstrap import build_engine, build_history
from adminflow.core.config import AdminflowConfig
from adminflow.core.errors import (
    IllegalTransitionError,
    NotFoundError,
    WorkflowDefinitionError,
)
from adminflow.reports.history import ReportHistoryService
from adminflow.reports.models import ReportHistoryItem, StorageInfo
from adminflow.server.models import CreateWorkflowRequest, HealthResponse, PdfCreatedRequest
from adminflow.workflow.engine import WorkflowEngine
from adminflow.workflow.models import Workflow
from adminflow.workflow.ordering import dependency_order

logger = logging.getLogger(__name__)

router = APIRouter()


def _engine(request: Request) -> WorkflowEngine:
    engine = getattr(request.app.state, "engine", None)
    if not isinstance(engine, WorkflowEngine):
        raise HTTPException(status_code=500, detail="Workflow engine not configured")
    return engine


def _history(request: Request) -> ReportHistoryService:
    history = getattr(request.app.state, "history", None)
    if not isinstance(history, ReportHistoryService):
        raise HTTPException(status_code=500, detail="Report history not configured")
    return history


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return HealthResponse(
        version=__version__,
        workflows=len(_engine(request).get_all_workflows()),
        reports=len(_history(request).get_history()),
    )


@router.get("/workflows", response_model=list[Workflow])
def list_workflows(request: Request) -> list[Workflow]:
    return _engine(request).get_all_workflows()


@router.post("/workflows", response_model=Workflow, status_code=201)
def create_workflow(request: Request, body: CreateWorkflowRequest) -> Workflow:
    workflow = body.workflow
    if body.sort_steps:
        workflow = workflow.model_copy(update={"steps": dependency_order(workflow.steps)})
    _engine(request).add_workflow(workflow)
    return workflow


@router.get("/workflows/{workflow_id}", response_model=Workflow)
def get_workflow(request: Request, workflow_id: str) -> Workflow:
    workflow = _engine(request).get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.post("/workflows/{workflow_id}/execute", response_model=Workflow)
async def execute_workflow(request: Request, workflow_id: str) -> Workflow:
    engine = _engine(request)
    await engine.execute_workflow(workflow_id)
    workflow = engine.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.get("/reports", response_model=list[ReportHistoryItem])
def list_reports(
    request: Request,
    workflow: str | None = Query(default=None, description="Only reports for this workflow"),
    limit: int | None = Query(default=None, ge=0),
) -> list[ReportHistoryItem]:
    history = _history(request)
    items = (
        history.get_reports_by_workflow(workflow) if workflow else history.get_history()
    )
    return items if limit is None else items[:limit]


@router.get("/reports/storage", response_model=StorageInfo)
def storage_info(request: Request) -> StorageInfo:
    return _history(request).get_storage_info()


@router.get("/reports/{report_id}", response_model=ReportHistoryItem)
def get_report(request: Request, report_id: str) -> ReportHistoryItem:
    item = _history(request).get_report(report_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return item


@router.post("/reports/{report_id}/pdf", response_model=ReportHistoryItem)
def mark_pdf_created(
    request: Request, report_id: str, body: PdfCreatedRequest | None = None
) -> ReportHistoryItem:
    pdf_url = body.pdf_url if body is not None else None
    return _history(request).update_report_status(report_id, "pdf_created", pdf_url)


@router.delete("/reports/{report_id}", status_code=204)
def delete_report(request: Request, report_id: str) -> None:
    _history(request).delete_report(report_id)


@router.delete("/reports", status_code=204)
def clear_reports(request: Request) -> None:
    _history(request).clear_history()


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(
    config: AdminflowConfig | None = None,
    *,
    engine: WorkflowEngine | None = None,
    history: ReportHistoryService | None = None,
) -> FastAPI:
    config = config or AdminflowConfig()

    if engine is None or history is None:
        backend = config.create_backend()
        engine = engine or build_engine(config, backend)
        history = history or build_history(config, backend)

    app = FastAPI(
        title="adminflow",
        version=__version__,
        description="REST API over the adminflow workflow engine and report history.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.config = config
    app.state.engine = engine
    app.state.history = history

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(IllegalTransitionError)
    async def _illegal_transition(_request: Request, exc: IllegalTransitionError) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(WorkflowDefinitionError)
    async def _bad_definition(_request: Request, exc: WorkflowDefinitionError) -> JSONResponse:
        return _error_response(422, exc)

    app.include_router(router, prefix="/api")
    logger.debug("App created", extra={"storage_backend": config.storage.backend})
    return app
