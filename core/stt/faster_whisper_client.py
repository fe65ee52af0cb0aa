# core/stt/faster_whisper_client.py
"""
faster-whisper STT client for voice assistant.

Consumes mono float32 samples at 16 kHz and returns cleaned transcript text.
Model loading and inference run in the default executor so the control loop
stays responsive.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from faster_whisper import WhisperModel

from core.errors import CollaboratorError
from core.stt.transcript import join_segments
from utils.device import best_device

logger = logging.getLogger(__name__)


@dataclass
class STTResult:
    """Result from speech transcription."""
    text: str
    language: str
    language_probability: float
    latency_ms: float


@dataclass
class STTConfig:
    """Configuration for faster-whisper STT."""
    model_name: str = "tiny.en"  # Model size
    device: str = "auto"  # Device: "auto", "cpu", "cuda"
    compute_type: str = "auto"  # Compute type: auto, float16, float32, int8
    language: str = "en"
    beam_size: int = 1  # 1 = greedy decoding
    sample_rate: int = 16000  # rate the model expects

    def __post_init__(self):
        """Auto-detect device if needed."""
        if self.device == "auto":
            self.device = best_device(prefer_mps=False)  # MPS not well supported in faster-whisper
            logger.info(f"Auto-detected device: {self.device}")


class FasterWhisperSTT:
    """
    faster-whisper STT client with async interface.

    Failures are raised as CollaboratorError so the conversation loop can
    recover; an empty transcript is a valid result, not an error.
    """

    def __init__(self, config: STTConfig = None):
        self.config = config or STTConfig()
        self.model = None
        self._stats = {
            "total_requests": 0,
            "total_latency": 0,
            "total_audio_duration": 0,
            "errors": 0
        }

        logger.info(f"FasterWhisperSTT config: model={self.config.model_name}, device={self.config.device}")

    async def initialize(self) -> bool:
        """
        Load the WhisperModel.

        Returns:
            True if initialization successful, False otherwise
        """
        if self.model is not None:
            return True

        try:
            start_time = time.time()

            def _load_model():
                return WhisperModel(
                    self.config.model_name,
                    device=self.config.device,
                    compute_type=self.config.compute_type
                )

            self.model = await asyncio.get_running_loop().run_in_executor(None, _load_model)

            load_time = time.time() - start_time
            logger.info(f"faster-whisper model '{self.config.model_name}' loaded in {load_time:.2f}s on {self.config.device}")
            return True

        except Exception as e:
            logger.error(f"Failed to load faster-whisper model: {e}")
            return False

    async def transcribe(self, audio: np.ndarray) -> STTResult:
        """
        Transcribe mono samples to text.

        Args:
            audio: Float samples in [-1, 1] at ``config.sample_rate``

        Returns:
            STTResult with cleaned transcription

        Raises:
            CollaboratorError: if the model is unavailable or inference fails
        """
        if self.model is None and not await self.initialize():
            raise CollaboratorError(f"STT model '{self.config.model_name}' is not available")

        audio = np.asarray(audio, dtype=np.float32)
        start_time = time.time()

        def _transcribe_sync():
            segments, info = self.model.transcribe(
                audio,
                language=self.config.language,
                beam_size=self.config.beam_size,
                condition_on_previous_text=False,
                temperature=0.0,
            )
            # segments is a lazy generator; decoding happens while joining
            return join_segments(seg.text for seg in segments), info

        try:
            text, info = await asyncio.get_running_loop().run_in_executor(None, _transcribe_sync)
        except Exception as e:
            self._stats["errors"] += 1
            raise CollaboratorError(f"Transcription failed: {e}") from e

        latency_ms = (time.time() - start_time) * 1000
        self._stats["total_requests"] += 1
        self._stats["total_latency"] += latency_ms
        self._stats["total_audio_duration"] += len(audio) / self.config.sample_rate

        logger.debug(f"Transcribed in {latency_ms:.1f}ms: '{text[:50]}'")
        return STTResult(
            text=text,
            language=getattr(info, "language", self.config.language),
            language_probability=getattr(info, "language_probability", 0.0),
            latency_ms=latency_ms,
        )

    async def health_check(self) -> Tuple[bool, str]:
        """
        Check if STT service is healthy.

        Returns:
            Tuple of (is_healthy: bool, status_message: str)
        """
        if self.model is None and not await self.initialize():
            return False, "Model initialization failed"
        return True, f"Model {self.config.model_name} ready (device: {self.config.device})"

    def get_stats(self) -> dict:
        """Get performance statistics."""
        stats = self._stats.copy()
        if stats["total_requests"] > 0:
            stats["avg_latency_ms"] = stats["total_latency"] / stats["total_requests"]
            stats["error_rate"] = stats["errors"] / (stats["total_requests"] + stats["errors"])
        else:
            stats["avg_latency_ms"] = 0
            stats["error_rate"] = 0
        return stats
