from __future__ import annotations

from enum import Enum

from adminflow.core.errors import IllegalTransitionError


class ReportStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    GENERATED = "generated"
    PDF_CREATED = "pdf_created"
    FAILED = "failed"


# Self-loops on generating/generated let callers relabel phase and progress.
ALLOWED_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.PENDING: {ReportStatus.GENERATING, ReportStatus.FAILED},
    ReportStatus.GENERATING: {
        ReportStatus.GENERATING,
        ReportStatus.GENERATED,
        ReportStatus.FAILED,
    },
    ReportStatus.GENERATED: {ReportStatus.GENERATED, ReportStatus.PDF_CREATED},
    ReportStatus.FAILED: set(),
    ReportStatus.PDF_CREATED: set(),
}

TERMINAL_STATES: frozenset[ReportStatus] = frozenset(
    s for s, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# `report` is set exactly in these states.
STATES_WITH_REPORT: frozenset[ReportStatus] = frozenset(
    {ReportStatus.GENERATED, ReportStatus.PDF_CREATED}
)


def transition(*, current: ReportStatus, to: ReportStatus) -> ReportStatus:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


def is_terminal(status: ReportStatus) -> bool:
    return status in TERMINAL_STATES
