"""
Fixed-duration microphone capture.

The sounddevice callback runs on the audio thread and acts as the producer:
it down-mixes to mono, applies the noise gate and hands chunks over through a
bounded queue. ``record`` blocks for the requested window, stops the stream
and drains whatever was queued.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import Optional

import numpy as np
import sounddevice as sd

from core.audio.conditioner import NOISE_GATE_THRESHOLD, apply_noise_gate
from core.errors import DeviceUnavailableError, StreamError

logger = logging.getLogger(__name__)


@dataclass
class AudioConfig:
    """Capture device configuration."""
    device: Optional[int] = None  # None = system default input
    channels: int = 1  # mono for speech recognition
    dtype: str = 'float32'
    noise_gate_threshold: float = NOISE_GATE_THRESHOLD
    queue_max_chunks: int = 4096  # bound on buffered callback chunks


@dataclass
class CapturedAudio:
    """Raw mono samples from one capture window."""
    samples: np.ndarray
    sample_rate: int

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


class AudioCapture:
    """Blocking capture of a fixed wall-clock window from the default input."""

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()
        self.audio_queue: Queue = Queue(maxsize=self.config.queue_max_chunks)
        self.is_recording = False
        self._dropped_chunks = 0

    def _audio_callback(self, indata, frames, time_info, status):
        """Producer side: runs on the audio thread and should be fast."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        if not self.is_recording:
            return

        chunk = np.asarray(indata, dtype=np.float32)
        if chunk.ndim > 1:
            chunk = chunk.mean(axis=1) if chunk.shape[1] > 1 else chunk[:, 0]
        chunk = apply_noise_gate(chunk, self.config.noise_gate_threshold)

        try:
            self.audio_queue.put_nowait(chunk)
        except Full:
            self._dropped_chunks += 1

    def get_input_device(self) -> dict:
        """
        Look up the capture device.

        Returns:
            sounddevice device info dict

        Raises:
            DeviceUnavailableError: if no input device exists
        """
        try:
            info = sd.query_devices(self.config.device, kind='input')
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceUnavailableError(f"No input device available: {e}") from e

        if not info or info.get("max_input_channels", 0) < 1:
            raise DeviceUnavailableError("No input device available")
        return info

    def record(self, duration: float) -> CapturedAudio:
        """
        Capture ``duration`` seconds of audio.

        A driver fault aborts the window and yields an empty buffer.

        Args:
            duration: Window length in seconds

        Returns:
            CapturedAudio at the device's native rate
        """
        info = self.get_input_device()
        sample_rate = int(info["default_samplerate"])
        channels = min(self.config.channels, int(info["max_input_channels"]))
        logger.debug(f"Recording {duration:.1f}s from '{info.get('name')}' at {sample_rate}Hz")

        self._drain()
        self._dropped_chunks = 0

        try:
            self._run_stream(sample_rate, channels, duration)
        except StreamError as e:
            logger.error(f"{e}; discarding window")
            self._drain()
            return CapturedAudio(np.zeros(0, dtype=np.float32), sample_rate)

        if self._dropped_chunks:
            logger.debug(f"Dropped {self._dropped_chunks} chunks, hand-off queue was full")

        chunks = self._drain()
        samples = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.float32)
        return CapturedAudio(samples, sample_rate)

    def _run_stream(self, sample_rate: int, channels: int, duration: float):
        """Keep an input stream open for ``duration`` seconds."""
        try:
            with sd.InputStream(
                samplerate=sample_rate,
                channels=channels,
                dtype=self.config.dtype,
                device=self.config.device,
                callback=self._audio_callback,
            ):
                self.is_recording = True
                try:
                    time.sleep(duration)
                finally:
                    self.is_recording = False
        except sd.PortAudioError as e:
            raise StreamError(f"Capture stream failed: {e}") from e

    def _drain(self) -> list:
        """Collect every queued chunk without blocking."""
        chunks = []
        while True:
            try:
                chunks.append(self.audio_queue.get_nowait())
            except Empty:
                break
        return chunks


# Async wrapper for use with asyncio
class AsyncAudioCapture:
    """Async wrapper around AudioCapture; capture runs on the default executor."""

    def __init__(self, config: Optional[AudioConfig] = None):
        self.capture = AudioCapture(config)

    async def record(self, duration: float) -> CapturedAudio:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.capture.record, duration)
