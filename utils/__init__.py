"""
Utility functions for voice assistant.
"""

from .events import AudioEvent, ErrorEvent, StateChangeEvent, TranscriptEvent
from .metrics import timer, log_latency

__all__ = [
    "AudioEvent",
    "ErrorEvent",
    "StateChangeEvent",
    "TranscriptEvent",
    "timer",
    "log_latency"
]
