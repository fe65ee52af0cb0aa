"""
Audio playback for synthesized speech.

Playback blocks until the output device has drained, and the async wrapper
plays a sequence of chunks strictly in order, returning only after the last
one finishes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np
import sounddevice as sd

from core.errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass
class PlaybackConfig:
    """Audio playback configuration."""
    sample_rate: int = 24000  # Chatterbox native sample rate
    channels: int = 1
    device: Optional[int] = None  # Use default output device


class AudioPlayback:
    """Blocking playback via sounddevice."""

    def __init__(self, config: Optional[PlaybackConfig] = None):
        self.config = config or PlaybackConfig()
        self.is_playing = False

    def play_audio(self, audio: np.ndarray, sample_rate: Optional[int] = None) -> None:
        """
        Play audio and wait for it to finish.

        Args:
            audio: Audio data as numpy array
            sample_rate: Sample rate of audio (uses config default if None)

        Raises:
            CollaboratorError: if the output device fails
        """
        if sample_rate is None:
            sample_rate = self.config.sample_rate

        prepared = self._prepare_audio_for_playback(audio)
        if len(prepared) == 0:
            return

        try:
            self.is_playing = True
            sd.play(prepared, samplerate=sample_rate, device=self.config.device)
            sd.wait()
        except sd.PortAudioError as e:
            raise CollaboratorError(f"Audio playback failed: {e}") from e
        finally:
            self.is_playing = False

    def _prepare_audio_for_playback(self, audio: np.ndarray) -> np.ndarray:
        """Convert to mono float32 and keep peaks below clipping."""
        audio = np.asarray(audio)
        if audio.dtype != np.float32:
            if audio.dtype == np.int16:
                audio = audio.astype(np.float32) / 32768.0
            elif audio.dtype == np.int32:
                audio = audio.astype(np.float32) / 2147483648.0
            else:
                audio = audio.astype(np.float32)

        if audio.ndim > 1 and self.config.channels == 1:
            audio = np.mean(audio, axis=1)

        if len(audio) == 0:
            return audio

        max_val = np.max(np.abs(audio))
        if max_val > 0.95:
            audio = audio * (0.95 / max_val)

        return audio

    def stop_playback(self):
        """Stop current audio playback."""
        if self.is_playing:
            sd.stop()
            self.is_playing = False

    def is_active(self) -> bool:
        """Check if audio is currently playing."""
        return self.is_playing


class AsyncAudioPlayback:
    """Async wrapper for AudioPlayback."""

    def __init__(self, config: Optional[PlaybackConfig] = None):
        self.playback = AudioPlayback(config)

    async def play_audio(self, audio: np.ndarray, sample_rate: Optional[int] = None) -> None:
        """Play audio, returning once the device has drained."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.playback.play_audio, audio, sample_rate)

    async def play_chunks(self, chunks: Iterable[Tuple[np.ndarray, int]]) -> None:
        """Play ``(audio, sample_rate)`` chunks in order."""
        for audio, sample_rate in chunks:
            await self.play_audio(audio, sample_rate)

    def stop_playback(self):
        """Cut off the chunk being played; callable from a signal handler."""
        self.playback.stop_playback()
