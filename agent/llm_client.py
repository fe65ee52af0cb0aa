"""
LLM client for the reasoning backend via Ollama.

Sends one transcribed utterance with a fixed system instruction and returns a
single text reply. Request timeouts are whatever the caller configures on the
underlying HTTP client.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import ollama

from core.errors import CollaboratorError


logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful voice assistant. Keep your responses clear, concise, "
    "and natural. Use only words in your response, no emojis."
)


@dataclass
class LLMConfig:
    """Configuration for LLM client."""
    model_name: str = "llama3.2:latest"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = 0.7
    timeout: Optional[float] = 60.0
    host: str = "http://localhost:11434"


@dataclass
class LLMResponse:
    """Response from LLM including metadata."""
    content: str
    latency_ms: float
    model: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class OllamaLLMClient:
    """
    Non-streaming Ollama generate client.

    Any transport failure or a reply without a usable ``response`` field is
    raised as CollaboratorError.
    """

    def __init__(self, config: Optional[LLMConfig] = None, client: Optional[ollama.Client] = None):
        self.config = config or LLMConfig()
        self.client = client or ollama.Client(host=self.config.host, timeout=self.config.timeout)

        logger.info(f"Initialized OllamaLLMClient with model: {self.config.model_name}")

    async def generate_response(self, prompt: str) -> LLMResponse:
        """
        Generate a reply for a single prompt.

        Args:
            prompt: User's transcribed speech

        Returns:
            LLMResponse with content and metadata
        """
        start_time = time.time()

        try:
            response = await asyncio.get_running_loop().run_in_executor(
                None,
                self._ollama_generate_sync,
                prompt
            )
        except Exception as e:
            raise CollaboratorError(f"Ollama request failed: {e}") from e

        content = _get_field(response, "response")
        if not isinstance(content, str):
            raise CollaboratorError("Invalid response format from Ollama")
        content = content.strip()

        latency_ms = (time.time() - start_time) * 1000
        logger.info(f"Generated response in {latency_ms:.1f}ms: {content[:50]}...")

        return LLMResponse(
            content=content,
            latency_ms=latency_ms,
            model=self.config.model_name,
            prompt_tokens=_get_field(response, "prompt_eval_count"),
            completion_tokens=_get_field(response, "eval_count")
        )

    def _ollama_generate_sync(self, prompt: str) -> Any:
        """Synchronous Ollama generate call for thread executor."""
        return self.client.generate(
            model=self.config.model_name,
            prompt=prompt,
            system=self.config.system_prompt,
            stream=False,
            options={"temperature": self.config.temperature},
        )

    async def health_check(self) -> Tuple[bool, str]:
        """
        Check if Ollama service and model are available.

        Returns:
            Tuple of (is_healthy, status_message)
        """
        try:
            response = await asyncio.get_running_loop().run_in_executor(None, self.client.list)
        except Exception as e:
            return False, f"Ollama service unavailable: {e}"

        model_names = [model.model for model in response.models]
        if self.config.model_name in model_names:
            return True, f"Model {self.config.model_name} available"
        return False, f"Model {self.config.model_name} not found. Available: {model_names}"


def _get_field(response: Any, key: str) -> Any:
    """Read a field from an ollama response object or a plain dict."""
    if isinstance(response, dict):
        return response.get(key)
    try:
        return response[key]
    except (KeyError, TypeError, AttributeError):
        return getattr(response, key, None)
