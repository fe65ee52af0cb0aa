"""
Event records emitted by the conversation loop.

Observers (UI, telemetry, tests) receive these through callbacks; nothing in
the detection path reads them back.
"""
from dataclasses import dataclass, field
import time


@dataclass
class AudioEvent:
    """One conditioned capture window."""
    sample_count: int
    sample_rate: int
    source_rate: int
    timestamp: float


@dataclass
class TranscriptEvent:
    """Speech-to-text result for a capture window."""
    text: str
    stage: str  # "wake_word", "command"
    timestamp: float


@dataclass
class StateChangeEvent:
    """Conversation state transition."""
    previous: str
    current: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class ErrorEvent:
    """Error information for diagnostics."""
    stage: str  # "capture", "stt", "llm", "tts", ...
    error: Exception
    timestamp: float
