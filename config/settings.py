"""
Configuration management for Yo Assistant.

Loads settings from ~/.yo/config.toml with fallback to defaults.
"""
import copy
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict, fields

from agent.llm_client import DEFAULT_SYSTEM_PROMPT
from core.audio.vad import DetectorConfig
from core.errors import ConfigurationError
from core.state_machine import ConversationConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".yo" / "config.toml"

# Default configuration values
DEFAULT_CONFIG = {
    "audio": {
        "target_sample_rate": 16000,
        "noise_gate_threshold": 0.02,
        "wake_window_seconds": 2.0,
        "listen_window_seconds": 5.0,
        "queue_max_chunks": 4096,
        "debug_dump_dir": ""
    },
    "detector": {
        "energy_threshold": 0.02,
        "silence_duration_seconds": 0.5,
        "activation_word": "yo",
        "consecutive_frame_requirement": 3,
        "frame_size": 1024,
        "history_capacity": 50,
        "noise_floor_multiplier": 2.5,
        "floor_percentile": 0.1,
        "default_noise_floor": 0.01,
        "max_edit_distance": 1
    },
    "stt": {
        "model_name": "tiny.en",
        "device": "auto",
        "compute_type": "auto",
        "language": "en",
        "beam_size": 1
    },
    "llm": {
        "base_url": "http://localhost:11434",
        "model": "llama3.2:latest",
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "temperature": 0.7,
        "timeout": 60.0
    },
    "tts": {
        "device": "cpu"
    },
    "conversation": {
        "max_history": 10,
        "retry_delay_seconds": 1.0
    },
    "ui": {
        "verbose": False,
        "quiet": False
    }
}

@dataclass
class YoConfig:
    """Main configuration class for Yo Assistant."""
    audio: Dict[str, Any]
    detector: Dict[str, Any]
    stt: Dict[str, Any]
    llm: Dict[str, Any]
    tts: Dict[str, Any]
    conversation: Dict[str, Any]
    ui: Dict[str, Any]

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'YoConfig':
        """
        Load configuration from file with fallback to defaults.

        Args:
            config_path: Path to config file (defaults to ~/.yo/config.toml)

        Returns:
            YoConfig instance with merged settings
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        config_data = copy.deepcopy(DEFAULT_CONFIG)

        if config_path.exists():
            try:
                import tomllib  # Python 3.11+
                with open(config_path, "rb") as f:
                    user_config = tomllib.load(f)

                config_data = _deep_merge(config_data, user_config)
                logger.info(f"Loaded configuration from {config_path}")

            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}")
                logger.info("Using default configuration")
        else:
            logger.info(f"Config file not found at {config_path}, using defaults")

            try:
                config_path.parent.mkdir(parents=True, exist_ok=True)
                _create_example_config(config_path)
            except OSError as e:
                logger.warning(f"Could not create example config: {e}")

        known = {key: config_data[key] for key in DEFAULT_CONFIG}
        return cls(**known)

    def save(self, config_path: Optional[str] = None) -> bool:
        """
        Save current configuration to file.

        Args:
            config_path: Path to save config (defaults to ~/.yo/config.toml)

        Returns:
            True if saved successfully, False otherwise
        """
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w") as f:
                f.write(_dict_to_toml(asdict(self)))

            logger.info(f"Configuration saved to {config_path}")
            return True

        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

    def detector_config(self) -> DetectorConfig:
        """Build the detector settings; raises ConfigurationError if invalid."""
        known = {f.name for f in fields(DetectorConfig)}
        unknown = sorted(set(self.detector) - known)
        if unknown:
            raise ConfigurationError(f"Unknown [detector] settings: {', '.join(unknown)}")
        return DetectorConfig(**self.detector)

    def conversation_config(self) -> ConversationConfig:
        """Build the conversation loop settings."""
        return ConversationConfig(
            wake_window_seconds=self.audio["wake_window_seconds"],
            listen_window_seconds=self.audio["listen_window_seconds"],
            target_sample_rate=self.audio["target_sample_rate"],
            noise_gate_threshold=self.audio["noise_gate_threshold"],
            max_history=self.conversation["max_history"],
            retry_delay_seconds=self.conversation["retry_delay_seconds"],
            debug_dump_dir=self.audio["debug_dump_dir"] or None,
        )

def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result

def _create_example_config(config_path: Path) -> None:
    """Create an example configuration file."""
    toml_content = _dict_to_toml(DEFAULT_CONFIG)

    header = """# Yo Assistant Configuration
# This file was auto-generated with default values.
# Customize settings below and restart the assistant to apply changes.

"""

    with open(config_path, "w") as f:
        f.write(header + toml_content)

    logger.info(f"Created example config at {config_path}")

def _dict_to_toml(data: Dict[str, Any], indent: int = 0) -> str:
    """Convert dictionary to TOML format (simple implementation)."""
    lines = []
    indent_str = "  " * indent

    for key, value in data.items():
        if isinstance(value, dict):
            lines.append(f"{indent_str}[{key}]")
            lines.append(_dict_to_toml(value, indent + 1))
        elif isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
            lines.append(f'{indent_str}{key} = "{escaped}"')
        elif isinstance(value, bool):
            lines.append(f'{indent_str}{key} = {str(value).lower()}')
        elif isinstance(value, (int, float)):
            lines.append(f'{indent_str}{key} = {value}')
        else:
            lines.append(f'{indent_str}{key} = "{str(value)}"')

    return "\n".join(lines)

# Convenience function
def load_config(config_path: Optional[str] = None) -> YoConfig:
    """Load Yo configuration from file or defaults."""
    return YoConfig.load(config_path)
