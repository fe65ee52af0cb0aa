"""
Adaptive energy-based Voice Activity Detection.

A fixed energy threshold breaks down as soon as the room gets noisier, so the
detector tracks a rolling low-percentile noise floor and only reports speech
after several consecutive frames rise well above it. Momentary clicks and pops
never reach the consecutive-frame requirement.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import numpy as np

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorConfig:
    """Immutable detector settings, validated when constructed."""
    energy_threshold: float = 0.02
    silence_duration_seconds: float = 0.5
    activation_word: str = "yo"
    consecutive_frame_requirement: int = 3
    frame_size: int = 1024  # samples per frame for activity checks
    history_capacity: int = 50
    noise_floor_multiplier: float = 2.5
    floor_percentile: float = 0.1
    default_noise_floor: float = 0.01
    max_edit_distance: int = 1

    def __post_init__(self):
        if not isinstance(self.activation_word, str) or not self.activation_word.strip():
            raise ConfigurationError("activation_word must be a non-empty string")
        if self.consecutive_frame_requirement <= 0:
            raise ConfigurationError(
                f"consecutive_frame_requirement must be positive, got {self.consecutive_frame_requirement}"
            )
        if self.frame_size <= 0:
            raise ConfigurationError(f"frame_size must be positive, got {self.frame_size}")
        if self.silence_duration_seconds <= 0:
            raise ConfigurationError(
                f"silence_duration_seconds must be positive, got {self.silence_duration_seconds}"
            )
        if self.history_capacity <= 0:
            raise ConfigurationError(f"history_capacity must be positive, got {self.history_capacity}")
        if not 0.0 < self.floor_percentile <= 1.0:
            raise ConfigurationError(f"floor_percentile must be in (0, 1], got {self.floor_percentile}")
        if self.max_edit_distance < 0:
            raise ConfigurationError(f"max_edit_distance must be >= 0, got {self.max_edit_distance}")


def frame_rms(frame: np.ndarray) -> float:
    """Root-mean-square energy of a frame; 0.0 for an empty frame."""
    if len(frame) == 0:
        return 0.0
    frame = np.asarray(frame, dtype=np.float64)
    return float(np.sqrt(np.mean(frame * frame)))


class NoiseFloorTracker:
    """Rolling low-percentile estimate of ambient frame energy."""

    def __init__(self, capacity: int = 50, percentile: float = 0.1,
                 default_floor: float = 0.01):
        self.capacity = capacity
        self.percentile = percentile
        self.default_floor = default_floor
        self.history: Deque[float] = deque(maxlen=capacity)
        self.noise_floor = default_floor

    def observe(self, rms: float) -> float:
        """
        Record a frame RMS value and recompute the noise floor.

        Args:
            rms: Energy of the most recent frame

        Returns:
            Updated noise floor
        """
        self.history.append(float(rms))
        if self.history:
            ordered = sorted(self.history)
            index = max(1, int(len(ordered) * self.percentile)) - 1
            self.noise_floor = ordered[index]
        return self.noise_floor

    def reset(self):
        """Forget all observations."""
        self.history.clear()
        self.noise_floor = self.default_floor


class VoiceActivityDetector:
    """
    Frame-based activity detector with an adaptive threshold.

    Activity and silence checks share the same noise-floor state, so calling
    one after the other carries adaptation across both.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self.tracker = NoiseFloorTracker(
            capacity=self.config.history_capacity,
            percentile=self.config.floor_percentile,
            default_floor=self.config.default_noise_floor,
        )

    @property
    def noise_floor(self) -> float:
        return self.tracker.noise_floor

    def dynamic_threshold(self) -> float:
        """Current activity threshold given the tracked noise floor."""
        return max(self.config.energy_threshold,
                   self.tracker.noise_floor * self.config.noise_floor_multiplier)

    def is_active(self, samples: np.ndarray, window_size: Optional[int] = None) -> bool:
        """
        Check whether ``samples`` contain sustained speech energy.

        Frames are visited in order; detection returns as soon as the
        consecutive-frame requirement is met, leaving later frames unread.

        Args:
            samples: Conditioned mono samples
            window_size: Samples per frame (defaults to ``config.frame_size``)

        Returns:
            True if enough consecutive frames exceeded the dynamic threshold
        """
        if window_size is None:
            window_size = self.config.frame_size
        if window_size <= 0:
            raise ConfigurationError(f"window_size must be positive, got {window_size}")

        samples = np.asarray(samples, dtype=np.float32)
        consecutive = 0

        for start in range(0, len(samples), window_size):
            rms = frame_rms(samples[start:start + window_size])
            self.tracker.observe(rms)
            threshold = self.dynamic_threshold()

            if rms > threshold:
                consecutive += 1
                if consecutive >= self.config.consecutive_frame_requirement:
                    logger.debug(f"Voice active at sample {start} (rms={rms:.4f}, threshold={threshold:.4f})")
                    return True
            else:
                consecutive = 0

        return False

    def is_silent(self, samples: np.ndarray, sample_rate: int) -> bool:
        """Check for silence using frames of ``silence_duration_seconds``."""
        window_size = int(round(sample_rate * self.config.silence_duration_seconds))
        return not self.is_active(samples, window_size)

    def reset(self):
        """Reset the adaptive noise floor."""
        self.tracker.reset()
