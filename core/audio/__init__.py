"""
Core audio signal pipeline for the voice assistant.

This package provides:
- Sample conditioning (noise gate + linear resampling)
- Adaptive Voice Activity Detection
- Fixed-window microphone capture (``core.audio.capture``)
- Blocking speech playback (``core.audio.playback``)

Capture and playback talk to PortAudio through sounddevice, so they are
imported from their modules directly rather than re-exported here.
"""

from .conditioner import (
    NOISE_GATE_THRESHOLD,
    TARGET_SAMPLE_RATE,
    apply_noise_gate,
    resample_linear,
    condition
)

from .vad import (
    DetectorConfig,
    NoiseFloorTracker,
    VoiceActivityDetector,
    frame_rms
)

__all__ = [
    # Conditioning
    'NOISE_GATE_THRESHOLD',
    'TARGET_SAMPLE_RATE',
    'apply_noise_gate',
    'resample_linear',
    'condition',

    # Detection
    'DetectorConfig',
    'NoiseFloorTracker',
    'VoiceActivityDetector',
    'frame_rms'
]
