"""
Speech-to-Text (STT) module for voice assistant.

Wraps faster-whisper for transcription of 16 kHz mono capture windows.
The client lives in ``core.stt.faster_whisper_client``; only the model-free
transcript helpers are re-exported here.
"""

from .transcript import NON_SPEECH_MARKERS, clean_segment, join_segments

__all__ = ["NON_SPEECH_MARKERS", "clean_segment", "join_segments"]
