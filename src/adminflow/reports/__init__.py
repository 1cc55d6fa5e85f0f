"""Report-generation jobs: status automaton, persisted history and the runner."""

from adminflow.reports.history import ReportHistoryService
from adminflow.reports.models import ReportHistoryItem, StorageInfo
from adminflow.reports.runner import (
    GenerationService,
    run_report_generation,
    start_report_generation,
)
from adminflow.reports.state_machine import ALLOWED_TRANSITIONS, ReportStatus, transition

__all__ = [
    "ALLOWED_TRANSITIONS",
    "GenerationService",
    "ReportHistoryItem",
    "ReportHistoryService",
    "ReportStatus",
    "StorageInfo",
    "run_report_generation",
    "start_report_generation",
    "transition",
]
