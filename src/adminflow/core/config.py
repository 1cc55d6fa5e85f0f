"""Configuration for adminflow.

Settings are loaded from environment variables and a local `.env` file (if present).
Each section has its own prefix so the pieces can also be constructed on their own,
e.g. in tests: `StorageConfig(backend="memory")`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from adminflow.storage.backend import PersistenceBackend


class LLMConfig(BaseSettings):
    """Configuration for the LLM providers behind report generation."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to a local GGUF model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    max_tokens: int = Field(
        default=1200,
        gt=0,
        description="Token budget for each generated report section",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMINFLOW_LLM_",
        env_file=".env",
        extra="ignore",
    )


class StorageConfig(BaseSettings):
    """Where report history and workflow snapshots are persisted."""

    backend: Literal["memory", "file"] = Field(
        default="file",
        description="Persistence backend: in-process memory or JSON files on disk",
    )
    path: Path = Field(
        default=Path(".adminflow"),
        description="Directory for the file backend",
    )
    max_reports: int = Field(
        default=50,
        gt=0,
        description="Report history capacity; the oldest entries are dropped beyond it",
    )
    report_history_key: str = Field(
        default="adminflow_report_history",
        description="Key under which the report history blob is stored",
    )
    workflows_key: str = Field(
        default="adminflow_workflows",
        description="Key under which workflow snapshots are stored",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMINFLOW_STORAGE_",
        env_file=".env",
        extra="ignore",
    )


class EngineConfig(BaseSettings):
    """Workflow engine and simulated integration settings."""

    step_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Fail a step whose executor runs longer than this (None = no timeout)",
    )
    simulated_latency_scale: float = Field(
        default=1.0,
        ge=0.0,
        description="Multiplier on simulated integration latency (0 disables waiting)",
    )
    simulated_failure_rate: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Probability that a simulated API step fails",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMINFLOW_ENGINE_",
        env_file=".env",
        extra="ignore",
    )


class ServerConfig(BaseSettings):
    """REST adapter settings."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, gt=0, lt=65536, description="Bind port")
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMINFLOW_SERVER_",
        env_file=".env",
        extra="ignore",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class AdminflowConfig(BaseSettings):
    """Top-level configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging for adminflow loggers",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig, description="LLM configuration")
    storage: StorageConfig = Field(
        default_factory=StorageConfig, description="Storage configuration"
    )
    engine: EngineConfig = Field(default_factory=EngineConfig, description="Engine configuration")
    server: ServerConfig = Field(default_factory=ServerConfig, description="Server configuration")

    model_config = SettingsConfigDict(
        env_prefix="ADMINFLOW_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure structured logging based on settings."""
        from adminflow.core.logging import configure_logging

        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            level = "INFO"
        configure_logging(level, debug=self.debug)

    def create_backend(self) -> PersistenceBackend:
        """Build the configured persistence backend."""
        from adminflow.storage.backend import FileBackend, InMemoryBackend

        if self.storage.backend == "memory":
            return InMemoryBackend()
        return FileBackend(self.storage.path)
