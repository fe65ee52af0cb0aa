"""
Agent package for voice assistant.

Provides the reasoning backend integration.
"""

from .llm_client import (
    DEFAULT_SYSTEM_PROMPT,
    LLMConfig,
    LLMResponse,
    OllamaLLMClient,
)

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "LLMConfig",
    "LLMResponse",
    "OllamaLLMClient",
]
