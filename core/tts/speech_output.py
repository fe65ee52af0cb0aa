"""
Speech output: split a reply into utterances, synthesize and play them in order.
"""

import logging
import re
from typing import List

from core.errors import CollaboratorError

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"[.?!]")


def split_utterances(text: str) -> List[str]:
    """Split at sentence-ending punctuation, trimming and skipping empty chunks."""
    chunks = (chunk.strip() for chunk in _SENTENCE_END.split(text or ""))
    return [chunk for chunk in chunks if chunk]


class SpeechOutput:
    """
    Speaks a full response through a TTS client and a playback device.

    ``tts_client.synthesize(text)`` must return an object with ``audio`` and
    ``sample_rate``; ``playback.play_audio(audio, sample_rate)`` must return
    once the chunk has finished playing.
    """

    def __init__(self, tts_client, playback):
        self.tts_client = tts_client
        self.playback = playback

    async def speak(self, text: str) -> int:
        """
        Speak ``text`` chunk by chunk.

        Returns:
            Number of chunks played
        """
        chunks = split_utterances(text)
        for chunk in chunks:
            result = await self.tts_client.synthesize(chunk)
            if len(result.audio) == 0:
                raise CollaboratorError(f"TTS returned no audio for '{chunk[:30]}'")
            await self.playback.play_audio(result.audio, result.sample_rate)

        logger.debug(f"Spoke {len(chunks)} chunks")
        return len(chunks)
