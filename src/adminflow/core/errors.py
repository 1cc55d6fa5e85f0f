"""Exception types shared across adminflow.

Step and report failures are recorded as status on the persisted records; these
exceptions are raised only for caller mistakes (unknown ids, illegal transitions,
broken workflow definitions).
"""

from __future__ import annotations


class AdminflowError(Exception):
    """Base class for adminflow errors."""


class NotFoundError(AdminflowError, LookupError):
    """Raised when a workflow or report id is not known."""

    kind = "Item"

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"{self.kind} {item_id} not found")


class WorkflowNotFoundError(NotFoundError):
    kind = "Workflow"


class ReportNotFoundError(NotFoundError):
    kind = "Report"


class WorkflowDefinitionError(AdminflowError, ValueError):
    """Raised when a workflow's step graph cannot be ordered."""


class IllegalTransitionError(AdminflowError, ValueError):
    """Raised when a report job is moved along an edge the automaton does not define."""


class StepTimeoutError(AdminflowError, TimeoutError):
    """Raised inside the engine when a step exceeds the configured timeout."""
