"""
Wake word detection on recognized text.
"""

from .matcher import KNOWN_CONFUSIONS, WakeWordMatcher, levenshtein_distance

__all__ = ["KNOWN_CONFUSIONS", "WakeWordMatcher", "levenshtein_distance"]
