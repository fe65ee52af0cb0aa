#!/usr/bin/env python3
"""
Yo Assistant - spoken-interaction front end.

Wires the pipeline together and runs the conversation loop:
- Microphone capture with noise gate and resampling to 16 kHz
- Adaptive voice activity detection
- Wake word ("yo") matching on faster-whisper transcripts
- Replies from Ollama, spoken through Chatterbox TTS
"""

import asyncio
import logging
import signal
import sys
from typing import Optional
import argparse

from agent.llm_client import LLMConfig, OllamaLLMClient
from config.settings import YoConfig, load_config
from core.audio.capture import AsyncAudioCapture, AudioConfig
from core.audio.playback import AsyncAudioPlayback
from core.state_machine import ConversationStateMachine
from core.stt.faster_whisper_client import FasterWhisperSTT, STTConfig
from core.tts.chatterbox_client import ChatterboxTTSClient, TTSConfig
from core.tts.speech_output import SpeechOutput
from utils.logging_setup import set_log_level, setup_logging
from utils.metrics import log_latency


logger = logging.getLogger(__name__)


class YoAssistant:
    """
    Builds every collaborator from configuration and owns the state machine.

    Flow: Capture -> Condition -> VAD -> STT -> Wake word / Command -> LLM -> TTS
    """

    def __init__(self, config: YoConfig, quiet: bool = False):
        self.config = config
        self.quiet = quiet

        self.stt_client: Optional[FasterWhisperSTT] = None
        self.llm_client: Optional[OllamaLLMClient] = None
        self.tts_client: Optional[ChatterboxTTSClient] = None
        self.playback: Optional[AsyncAudioPlayback] = None
        self.state_machine: Optional[ConversationStateMachine] = None
        self._task: Optional[asyncio.Task] = None

    async def initialize_components(self) -> bool:
        """Initialize all pipeline components."""
        cfg = self.config

        # Detector settings are validated here, before anything else is loaded
        detector_config = cfg.detector_config()
        conversation_config = cfg.conversation_config()

        logger.info("Setting up audio capture...")
        capture = AsyncAudioCapture(AudioConfig(
            noise_gate_threshold=cfg.audio["noise_gate_threshold"],
            queue_max_chunks=cfg.audio["queue_max_chunks"],
        ))

        logger.info("Setting up STT client...")
        self.stt_client = FasterWhisperSTT(STTConfig(
            model_name=cfg.stt["model_name"],
            device=cfg.stt["device"],
            compute_type=cfg.stt["compute_type"],
            language=cfg.stt["language"],
            beam_size=cfg.stt["beam_size"],
            sample_rate=cfg.audio["target_sample_rate"],
        ))
        if not await self.stt_client.initialize():
            logger.error("Failed to initialize STT client")
            return False

        logger.info("Setting up LLM client...")
        self.llm_client = OllamaLLMClient(LLMConfig(
            model_name=cfg.llm["model"],
            system_prompt=cfg.llm["system_prompt"],
            temperature=cfg.llm["temperature"],
            timeout=cfg.llm["timeout"],
            host=cfg.llm["base_url"],
        ))

        logger.info("Setting up TTS client...")
        self.tts_client = ChatterboxTTSClient(TTSConfig(device=cfg.tts["device"]))
        if not await self.tts_client.initialize():
            logger.error("Failed to initialize TTS client")
            return False

        self.playback = AsyncAudioPlayback()
        speech = SpeechOutput(self.tts_client, self.playback)

        self.state_machine = ConversationStateMachine(
            capture=capture,
            stt=self.stt_client,
            llm=self.llm_client,
            speech=speech,
            config=conversation_config,
            detector_config=detector_config,
        )
        if not self.quiet:
            self.state_machine.add_state_listener(
                lambda event: print(f"[{event.current}]")
            )

        logger.info("All components initialized")
        return True

    async def _health_check_all(self):
        """Log health of the network and model collaborators."""
        checks = [
            ("LLM", await self.llm_client.health_check()),
            ("TTS", await self.tts_client.health_check()),
        ]
        for component, (healthy, message) in checks:
            status = "OK" if healthy else "FAIL"
            logger.info(f"{status} {component}: {message}")
            if not healthy:
                logger.warning(f"{component} failed its health check; continuing anyway")

    async def run(self) -> int:
        if not await self.initialize_components():
            return 1

        await self._health_check_all()

        if not self.quiet:
            word = self.state_machine.matcher.activation_word
            print(f"\nYo Assistant ready - say '{word}' to begin, Ctrl+C to quit\n")

        self._task = asyncio.current_task()
        try:
            await self.state_machine.run()
        except asyncio.CancelledError:
            logger.info("Conversation loop cancelled")
        return 0

    def stop(self):
        """Stop the loop and cut off any reply being spoken; capture is not interrupted."""
        if self.state_machine:
            self.state_machine.stop()
        if self.playback:
            self.playback.stop_playback()
        if self._task and not self._task.done():
            self._task.cancel()


def setup_signal_handlers(assistant: YoAssistant):
    """Setup graceful shutdown on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, assistant.stop)
        except NotImplementedError:
            # Windows event loops
            signal.signal(sig, lambda signum, frame: assistant.stop())


async def main():
    """Main entry point for Yo Assistant."""
    parser = argparse.ArgumentParser(description="Yo voice assistant")
    parser.add_argument("--config", "-c", help="Path to config.toml (default ~/.yo/config.toml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode")

    args = parser.parse_args()

    # Logging first so config loading is reported
    setup_logging(verbose=args.verbose, quiet=args.quiet)
    config = load_config(args.config)
    verbose = args.verbose or config.ui["verbose"]
    quiet = args.quiet or config.ui["quiet"]
    set_log_level(verbose=verbose, quiet=quiet)

    assistant = YoAssistant(config, quiet=quiet)
    setup_signal_handlers(assistant)

    try:
        return await assistant.run()
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1
    finally:
        if not quiet:
            log_latency()


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
