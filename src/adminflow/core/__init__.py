"""Core package initialization."""

from adminflow.core.config import (
    AdminflowConfig,
    EngineConfig,
    LLMConfig,
    ServerConfig,
    StorageConfig,
)
from adminflow.core.errors import (
    AdminflowError,
    IllegalTransitionError,
    NotFoundError,
    ReportNotFoundError,
    StepTimeoutError,
    WorkflowDefinitionError,
    WorkflowNotFoundError,
)

__all__ = [
    "AdminflowConfig",
    "AdminflowError",
    "EngineConfig",
    "IllegalTransitionError",
    "LLMConfig",
    "NotFoundError",
    "ReportNotFoundError",
    "ServerConfig",
    "StepTimeoutError",
    "StorageConfig",
    "WorkflowDefinitionError",
    "WorkflowNotFoundError",
]
