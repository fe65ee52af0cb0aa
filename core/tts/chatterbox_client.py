"""
Chatterbox TTS client for voice assistant.

Synthesizes one utterance chunk at a time with ChatterboxTTS.from_pretrained()
and returns raw samples for the playback layer.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from chatterbox import ChatterboxTTS

from core.errors import CollaboratorError
from utils.device import best_device

logger = logging.getLogger(__name__)


@dataclass
class TTSConfig:
    """Configuration for Chatterbox TTS."""
    device: str = "cpu"  # "auto", "cpu", "mps", or "cuda"
    sample_rate: int = 24000  # Chatterbox native sample rate

    def __post_init__(self):
        if self.device == "auto":
            self.device = best_device()


@dataclass
class TTSResult:
    """Result from text-to-speech synthesis."""
    audio: np.ndarray
    sample_rate: int
    latency_ms: float
    text: str


class ChatterboxTTSClient:
    """ChatterboxTTS client with an async synthesize() call."""

    def __init__(self, config: Optional[TTSConfig] = None):
        self.config = config or TTSConfig()
        self._tts = None
        self._initialized = False

        logger.info(f"ChatterboxTTSClient: device={self.config.device}")

    async def initialize(self) -> bool:
        """
        Load ChatterboxTTS.

        Returns:
            True if initialization successful, False otherwise
        """
        if self._initialized:
            return True

        try:
            start_time = time.time()

            loop = asyncio.get_running_loop()
            self._tts = await loop.run_in_executor(
                None,
                lambda: ChatterboxTTS.from_pretrained(device=self.config.device)
            )
            self.config.sample_rate = getattr(self._tts, "sr", self.config.sample_rate)

            self._initialized = True
            logger.info(f"ChatterboxTTS loaded in {time.time() - start_time:.2f}s")
            return True

        except Exception as e:
            logger.exception(f"Failed to initialize ChatterboxTTS: {e}")
            return False

    async def synthesize(self, text: str) -> TTSResult:
        """
        Synthesize speech from text.

        Args:
            text: Text to synthesize

        Returns:
            TTSResult with mono float audio

        Raises:
            CollaboratorError: if the model is unavailable or synthesis fails
        """
        if not self._initialized and not await self.initialize():
            raise CollaboratorError("TTS model is not available")

        start_time = time.time()

        try:
            loop = asyncio.get_running_loop()
            audio_tensor = await loop.run_in_executor(None, lambda: self._tts.generate(text))
        except Exception as e:
            raise CollaboratorError(f"TTS synthesis failed: {e}") from e

        # PyTorch tensor -> numpy
        if hasattr(audio_tensor, 'cpu'):
            audio = audio_tensor.squeeze().cpu().numpy()
        else:
            audio = np.asarray(audio_tensor).squeeze()

        latency_ms = (time.time() - start_time) * 1000
        logger.debug(f"Synthesized in {latency_ms:.1f}ms: '{text[:50]}'")

        return TTSResult(
            audio=audio.astype(np.float32),
            sample_rate=self.config.sample_rate,
            latency_ms=latency_ms,
            text=text
        )

    async def health_check(self) -> Tuple[bool, str]:
        """
        Check if TTS service is healthy.

        Returns:
            Tuple of (is_healthy: bool, status_message: str)
        """
        try:
            result = await self.synthesize("Test")
        except CollaboratorError as e:
            return False, f"TTS health check failed: {e}"

        if len(result.audio) > 0:
            return True, f"ChatterboxTTS ready (device: {self.config.device})"
        return False, "TTS synthesis test failed"
