"""
Text-based wake word matching.

Runs on the transcript of a short capture window, so it has to tolerate the
recognizer's mistakes. Checks are ordered cheapest and most precise first:
exact containment, then near-exact words by edit distance, then a small set
of known mis-transcriptions of the activation phrase.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple

from core.audio.vad import DetectorConfig
from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognizer confusions seen for short activation phrases
KNOWN_CONFUSIONS: Dict[str, Tuple[str, ...]] = {
    "yo": ("yo", "yoo", "you", "yeah"),
}


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance with unit insert, delete and substitute costs."""
    rows, cols = len(a) + 1, len(b) + 1
    matrix = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,         # deletion
                matrix[i][j - 1] + 1,         # insertion
                matrix[i - 1][j - 1] + cost,  # substitution
            )

    return matrix[-1][-1]


class WakeWordMatcher:
    """Decide whether transcribed text contains the activation phrase."""

    def __init__(self, activation_word: str = "yo",
                 max_edit_distance: int = 1,
                 min_word_length: int = 2,
                 confusions: Optional[Iterable[str]] = None):
        phrase = (activation_word or "").strip().lower()
        if not phrase:
            raise ConfigurationError("activation_word must not be empty")

        self.activation_word = phrase
        self.max_edit_distance = max_edit_distance
        self.min_word_length = min_word_length
        if confusions is None:
            confusions = KNOWN_CONFUSIONS.get(phrase, ())
        self.confusions = tuple(c.lower() for c in confusions if c)

    @classmethod
    def from_config(cls, config: DetectorConfig) -> "WakeWordMatcher":
        return cls(config.activation_word, max_edit_distance=config.max_edit_distance)

    def matches(self, text: str) -> bool:
        text = (text or "").lower()
        if not text:
            return False

        if self.activation_word in text:
            logger.debug(f"Wake word exact match in '{text}'")
            return True

        for word in text.split():
            if len(word) < self.min_word_length:
                continue
            distance = levenshtein_distance(word, self.activation_word)
            if distance <= self.max_edit_distance:
                logger.debug(f"Wake word fuzzy match: '{word}' (distance {distance})")
                return True

        for variant in self.confusions:
            if variant in text:
                logger.debug(f"Wake word matched known confusion '{variant}'")
                return True

        return False
