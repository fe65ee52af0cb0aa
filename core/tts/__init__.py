"""
Text-to-Speech (TTS) module for voice assistant.

``speech_output`` splits replies into utterances and plays them in order;
the Chatterbox backend lives in ``core.tts.chatterbox_client``.
"""

from .speech_output import SpeechOutput, split_utterances

__all__ = [
    "SpeechOutput",
    "split_utterances",
]
