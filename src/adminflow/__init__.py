"""adminflow.

Workflow execution and report-job orchestration for the automation demo:

- a single-pass, dependency-gated step scheduler (`WorkflowEngine`)
- a persisted report-generation job history with an explicit status automaton
"""

__version__ = "0.1.0"

from adminflow.core.config import AdminflowConfig
from adminflow.reports.history import ReportHistoryService
from adminflow.workflow.engine import WorkflowEngine

__all__ = ["__version__", "AdminflowConfig", "ReportHistoryService", "WorkflowEngine"]
