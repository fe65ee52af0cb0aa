"""
Conversation state machine.

Sequences capture windows against detection results:

    AWAITING_WAKE_WORD --[wake word heard]--> LISTENING
    LISTENING --[silence]--> AWAITING_WAKE_WORD
    LISTENING --[speech + transcript]--> PROCESSING --[reply spoken]--> AWAITING_WAKE_WORD

One ``step()`` is one orchestration cycle. Everything runs sequentially on the
control loop: a reply is fully spoken before the next window is captured.
Errors are recovered in ``run_cycle()``, so the loop never terminates on its
own.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Deque, List, Optional

import numpy as np

from core.audio.conditioner import NOISE_GATE_THRESHOLD, TARGET_SAMPLE_RATE, condition
from core.audio.vad import DetectorConfig, VoiceActivityDetector
from core.audio.wav import save_wav
from core.wakeword.matcher import WakeWordMatcher
from utils.events import AudioEvent, ErrorEvent, StateChangeEvent, TranscriptEvent
from utils.metrics import timer

logger = logging.getLogger(__name__)


class ConversationState(Enum):
    IDLE = "idle"  # only before start()
    AWAITING_WAKE_WORD = "awaiting_wake_word"
    LISTENING = "listening"
    PROCESSING = "processing"


@dataclass
class ConversationConfig:
    """Capture windows and loop behaviour."""
    wake_window_seconds: float = 2.0
    listen_window_seconds: float = 5.0
    target_sample_rate: int = TARGET_SAMPLE_RATE
    noise_gate_threshold: float = NOISE_GATE_THRESHOLD
    max_history: int = 10
    retry_delay_seconds: float = 1.0
    debug_dump_dir: Optional[str] = None  # write each window as WAV when set


@dataclass
class CommandHistoryEntry:
    """One completed exchange."""
    utterance: str
    response: str
    timestamp: float


class ConversationStateMachine:
    """
    Drives capture, detection and the external collaborators.

    Collaborators are duck-typed:
    - ``capture.record(seconds)`` -> object with ``samples`` and ``sample_rate``
    - ``stt.transcribe(samples)`` -> object with ``text``
    - ``llm.generate_response(prompt)`` -> object with ``content``
    - ``speech.speak(text)`` -> returns once playback has finished
    All four are awaited.
    """

    def __init__(self, capture, stt, llm, speech,
                 config: Optional[ConversationConfig] = None,
                 detector_config: Optional[DetectorConfig] = None,
                 vad: Optional[VoiceActivityDetector] = None,
                 matcher: Optional[WakeWordMatcher] = None):
        self.capture = capture
        self.stt = stt
        self.llm = llm
        self.speech = speech
        self.config = config or ConversationConfig()

        detector_config = detector_config or DetectorConfig()
        self.vad = vad or VoiceActivityDetector(detector_config)
        self.matcher = matcher or WakeWordMatcher.from_config(detector_config)

        self.state = ConversationState.IDLE
        self.history: Deque[CommandHistoryEntry] = deque(maxlen=self.config.max_history)
        self.errors: Deque[ErrorEvent] = deque(maxlen=50)
        self.cycle_count = 0

        self._stage = "idle"
        self._running = False
        self._state_listeners: List[Callable[[StateChangeEvent], None]] = []
        self._transcript_listeners: List[Callable[[TranscriptEvent], None]] = []
        self._audio_listeners: List[Callable[[AudioEvent], None]] = []

    # Observers

    def add_state_listener(self, callback: Callable[[StateChangeEvent], None]):
        self._state_listeners.append(callback)

    def add_transcript_listener(self, callback: Callable[[TranscriptEvent], None]):
        self._transcript_listeners.append(callback)

    def add_audio_listener(self, callback: Callable[[AudioEvent], None]):
        self._audio_listeners.append(callback)

    def _transition(self, new_state: ConversationState):
        if new_state == self.state:
            return
        event = StateChangeEvent(previous=self.state.value, current=new_state.value)
        logger.info(f"State: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self._notify(self._state_listeners, event)

    def _notify(self, listeners, event):
        # Observer failures are logged, never allowed to disturb the loop
        for callback in listeners:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Listener {callback!r} failed on {type(event).__name__}: {e}")

    # Lifecycle

    def start(self):
        """Enter the wake word loop; called once at startup."""
        self._transition(ConversationState.AWAITING_WAKE_WORD)

    def stop(self):
        """Ask ``run()`` to exit after the current cycle."""
        self._running = False

    async def run(self):
        """Run cycles until ``stop()`` is called or the task is cancelled."""
        self.start()
        self._running = True
        while self._running:
            await self.run_cycle()

    async def run_cycle(self) -> bool:
        """
        Run one guarded cycle.

        Returns:
            True if the cycle completed, False if it failed and was recovered
        """
        try:
            await self.step()
            return True
        except Exception as e:
            logger.error(f"Error during {self._stage}: {e}")
            logger.debug("Cycle failure details", exc_info=True)
            self.errors.append(ErrorEvent(stage=self._stage, error=e, timestamp=time.time()))
            self._transition(ConversationState.AWAITING_WAKE_WORD)
            await asyncio.sleep(self.config.retry_delay_seconds)
            return False

    async def step(self):
        """Advance the machine by one orchestration cycle."""
        self._stage = "cycle"
        self.cycle_count += 1

        if self.state in (ConversationState.IDLE, ConversationState.AWAITING_WAKE_WORD):
            await self._await_wake_word()
        elif self.state == ConversationState.LISTENING:
            await self._listen()
        elif self.state == ConversationState.PROCESSING:
            # Only reachable if a previous cycle was interrupted mid-reply
            self._transition(ConversationState.LISTENING)

    # States

    async def _await_wake_word(self):
        samples = await self._capture_window(self.config.wake_window_seconds, "wake_word")
        if len(samples) == 0:
            return

        text = await self._transcribe(samples, "wake_word")
        self._stage = "wake_word"
        if self.matcher.matches(text):
            logger.info(f"Wake word detected in '{text}'")
            self._transition(ConversationState.LISTENING)

    async def _listen(self):
        samples = await self._capture_window(self.config.listen_window_seconds, "input")

        self._stage = "vad"
        with timer("vad"):
            active = len(samples) > 0 and self.vad.is_active(samples)
            silent = not active and self.vad.is_silent(samples, self.config.target_sample_rate)

        if not active:
            if silent:
                logger.info("No voice detected, returning to wake word mode")
                self._transition(ConversationState.AWAITING_WAKE_WORD)
            return

        text = await self._transcribe(samples, "command")
        if not text:
            self._transition(ConversationState.AWAITING_WAKE_WORD)
            return

        logger.info(f"You said: {text}")
        self._transition(ConversationState.PROCESSING)
        await self._process(text)
        self._transition(ConversationState.AWAITING_WAKE_WORD)

    async def _process(self, text: str):
        self._stage = "llm"
        with timer("llm"):
            response = await self.llm.generate_response(text)
        reply = response.content
        logger.info(f"Assistant: {reply}")

        self.add_to_history(text, reply)

        self._stage = "tts"
        with timer("tts"):
            await self.speech.speak(reply)

    # Helpers

    async def _capture_window(self, seconds: float, name: str) -> np.ndarray:
        self._stage = "capture"
        raw = await self.capture.record(seconds)

        self._stage = "condition"
        with timer("condition"):
            samples = condition(raw.samples, raw.sample_rate,
                                self.config.target_sample_rate,
                                self.config.noise_gate_threshold)

        event = AudioEvent(
            sample_count=len(samples),
            sample_rate=self.config.target_sample_rate,
            source_rate=raw.sample_rate,
            timestamp=time.time()
        )
        self._notify(self._audio_listeners, event)

        if self.config.debug_dump_dir and len(samples) > 0:
            save_wav(samples, Path(self.config.debug_dump_dir) / f"{name}.wav",
                     self.config.target_sample_rate)
        return samples

    async def _transcribe(self, samples: np.ndarray, stage: str) -> str:
        self._stage = "stt"
        with timer("stt"):
            result = await self.stt.transcribe(samples)
        text = (result.text or "").strip()

        event = TranscriptEvent(text=text, stage=stage, timestamp=time.time())
        self._notify(self._transcript_listeners, event)
        return text

    def add_to_history(self, utterance: str, response: str):
        self.history.append(CommandHistoryEntry(utterance, response, time.time()))

    def get_status(self) -> dict:
        """Get current loop status."""
        return {
            "state": self.state.value,
            "stage": self._stage,
            "cycles": self.cycle_count,
            "history": len(self.history),
            "errors": len(self.errors),
            "noise_floor": self.vad.noise_floor,
            "activation_word": self.matcher.activation_word,
        }
