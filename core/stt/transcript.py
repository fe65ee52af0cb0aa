"""
Transcript cleanup for recognizer output.
"""

from typing import Iterable

# Per-segment markers the recognizer emits for non-speech audio
NON_SPEECH_MARKERS = ("[noise]", "[silence]", "[BLANK_AUDIO]")


def clean_segment(text: str, markers: Iterable[str] = NON_SPEECH_MARKERS) -> str:
    """Strip non-speech markers from a single segment and trim it."""
    for marker in markers:
        text = text.replace(marker, "")
    return text.strip()


def join_segments(segments: Iterable[str], markers: Iterable[str] = NON_SPEECH_MARKERS) -> str:
    """Clean each segment, drop empty ones and collapse whitespace."""
    markers = tuple(markers)
    cleaned = (clean_segment(segment, markers) for segment in segments)
    return " ".join(" ".join(cleaned).split())
