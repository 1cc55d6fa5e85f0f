"""LLM providers and the LLM-backed report generator."""

from adminflow.llm.factory import LLMFactory
from adminflow.llm.generation import DEFAULT_SECTIONS, LLMReportGenerator
from adminflow.llm.provider import LLMProvider

__all__ = [
    "DEFAULT_SECTIONS",
    "LLMFactory",
    "LLMProvider",
    "LLMReportGenerator",
]
