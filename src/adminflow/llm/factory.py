"""Factory for creating LLM providers."""

import logging

from adminflow.core.config import LLMConfig
from adminflow.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create the provider selected by `config.provider`.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info("Creating LLM provider", extra={"provider": config.provider})

        if config.provider == "openai":
            from adminflow.llm.openai_provider import OpenAIProvider

            return OpenAIProvider(config)
        if config.provider == "llama":
            from adminflow.llm.llama_provider import LLaMAProvider

            return LLaMAProvider(config)
        raise ValueError(f"Unsupported LLM provider: {config.provider}")
