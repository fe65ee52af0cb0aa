"""
Fast unit tests for Yo Assistant (< 3 seconds).

These tests focus on individual components without external dependencies.
Designed for fast CI/CD feedback loops.
"""
import pytest
import numpy as np
import time

# Import components to test
from utils.events import AudioEvent, TranscriptEvent, StateChangeEvent, ErrorEvent
from utils.metrics import TimingStats, MetricsCollector, timer
from config.settings import load_config, YoConfig, DEFAULT_CONFIG
from core.errors import ConfigurationError


class TestEvents:
    """Test event system components."""

    def test_audio_event_creation(self):
        """Test AudioEvent dataclass creation."""
        event = AudioEvent(
            sample_count=32000,
            sample_rate=16000,
            source_rate=44100,
            timestamp=time.time()
        )

        assert event.sample_rate == 16000
        assert event.source_rate == 44100
        assert event.timestamp > 0

    def test_transcript_event_creation(self):
        """Test TranscriptEvent dataclass creation."""
        event = TranscriptEvent(text="hey yo", stage="wake_word", timestamp=time.time())

        assert event.text == "hey yo"
        assert event.stage == "wake_word"

    def test_state_change_event_timestamp(self):
        """Test StateChangeEvent gets a timestamp by default."""
        event = StateChangeEvent(previous="idle", current="awaiting_wake_word")

        assert event.current == "awaiting_wake_word"
        assert event.timestamp > 0

    def test_error_event_creation(self):
        """Test ErrorEvent dataclass creation."""
        test_error = ValueError("Connection failed")
        event = ErrorEvent(
            stage="stt",
            error=test_error,
            timestamp=time.time()
        )

        assert event.stage == "stt"
        assert event.error == test_error


class TestMetrics:
    """Test metrics collection components."""

    def test_timing_stats_creation(self):
        """Test TimingStats dataclass."""
        stats = TimingStats("test", 0, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert stats.count == 0
        assert stats.total_time == 0.0
        assert stats.min_time == 0.0
        assert stats.max_time == 0.0

    def test_timing_stats_recording(self):
        """Test timing stats recording via MetricsCollector."""
        collector = MetricsCollector()

        collector.record_timing("test", 0.5)
        collector.record_timing("test", 1.0)
        collector.record_timing("test", 0.2)

        stats = collector.get_stats("test")
        assert stats.count == 3
        assert stats.total_time == pytest.approx(1.7)
        assert stats.min_time == 0.2
        assert stats.max_time == 1.0
        assert stats.avg_time == pytest.approx(1.7 / 3)
        assert stats.last_time == 0.2

    def test_unknown_stage(self):
        assert MetricsCollector().get_stats("missing") is None

    def test_timer_context_manager(self):
        """Test timer context manager."""
        from utils.metrics import _metrics
        _metrics.clear()  # Start fresh

        with timer("test_operation"):
            time.sleep(0.1)  # Sleep for 100ms

        stats = _metrics.get_stats("test_operation")
        assert stats.count == 1
        assert 0.08 < stats.avg_time < 0.5

    def test_timer_records_on_error(self):
        from utils.metrics import _metrics
        _metrics.clear()

        with pytest.raises(RuntimeError):
            with timer("stt"):
                raise RuntimeError("model crashed")

        assert _metrics.get_stats("stt").count == 1

    def test_threshold_monitoring(self):
        """Test threshold monitoring."""
        collector = MetricsCollector()

        collector.record_timing("vad", 0.01)  # Under threshold
        collector.record_timing("vad", 0.2)   # Over threshold

        assert len(collector.warnings) == 1
        assert "vad" in collector.warnings[0]

    def test_timings_capped_per_stage(self):
        collector = MetricsCollector(max_samples=100, max_warnings=10)

        for _ in range(5000):
            collector.record_timing("stt", 2.0)

        assert len(collector.timings["stt"]) == 100
        assert len(collector.warnings) == 10
        assert collector.warning_count == 5000
        assert collector.get_stats("stt").count == 100

    def test_stats_cover_most_recent_samples(self):
        collector = MetricsCollector(max_samples=3)

        for duration in (0.9, 0.1, 0.2, 0.3):
            collector.record_timing("condition", duration)

        stats = collector.get_stats("condition")
        assert stats.max_time == 0.3
        assert stats.min_time == 0.1
        assert stats.last_time == 0.3

    def test_global_collector_is_bounded(self):
        from utils.metrics import _metrics, DEFAULT_MAX_SAMPLES
        _metrics.clear()

        for _ in range(DEFAULT_MAX_SAMPLES + 50):
            _metrics.record_timing("llm", 0.01)

        assert len(_metrics.timings["llm"]) == DEFAULT_MAX_SAMPLES
        _metrics.clear()

    def test_invalid_caps_rejected(self):
        with pytest.raises(ValueError):
            MetricsCollector(max_samples=0)


class TestConfiguration:
    """Test configuration system."""

    def test_default_config_structure(self):
        """Test default configuration has required keys."""
        for section in ("audio", "detector", "stt", "llm", "tts", "conversation", "ui"):
            assert section in DEFAULT_CONFIG

    def test_missing_file_uses_defaults_and_writes_example(self, tmp_path):
        """Test loading configuration with defaults."""
        path = tmp_path / "yo" / "config.toml"
        config = load_config(str(path))

        assert config.audio["target_sample_rate"] == 16000
        assert config.detector["activation_word"] == "yo"
        assert config.llm["model"] == "llama3.2:latest"
        assert config.stt["model_name"] == "tiny.en"
        assert path.exists()

    def test_example_config_round_trips(self, tmp_path):
        path = tmp_path / "config.toml"
        load_config(str(path))

        assert load_config(str(path)) == YoConfig(**DEFAULT_CONFIG)

    def test_user_overrides_merged(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[detector]\nactivation_word = "computer"\nconsecutive_frame_requirement = 5\n'
            '[llm]\nmodel = "mistral:7b"\n'
        )

        config = load_config(str(path))

        assert config.detector["activation_word"] == "computer"
        assert config.detector["consecutive_frame_requirement"] == 5
        assert config.detector["frame_size"] == 1024
        assert config.llm["model"] == "mistral:7b"
        assert config.llm["temperature"] == 0.7

    def test_invalid_toml_falls_back(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[audio\nthis is not toml")

        config = load_config(str(path))
        assert config.audio == DEFAULT_CONFIG["audio"]

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "saved.toml"
        config = YoConfig(**DEFAULT_CONFIG)
        config.conversation = dict(config.conversation, max_history=3)

        assert config.save(str(path)) is True
        assert load_config(str(path)).conversation["max_history"] == 3

    def test_detector_config_built(self):
        detector = YoConfig(**DEFAULT_CONFIG).detector_config()

        assert detector.energy_threshold == 0.02
        assert detector.consecutive_frame_requirement == 3
        assert detector.silence_duration_seconds == 0.5

    def test_invalid_detector_settings_rejected(self):
        config = YoConfig(**DEFAULT_CONFIG)
        config.detector = dict(config.detector, consecutive_frame_requirement=0)

        with pytest.raises(ConfigurationError):
            config.detector_config()

    def test_unknown_detector_setting_rejected(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[detector]\nactivation_wrod = "computer"\n')

        config = load_config(str(path))

        with pytest.raises(ConfigurationError, match="activation_wrod"):
            config.detector_config()

    def test_frame_size_read_from_detector_section(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[detector]\nframe_size = 512\n")

        assert load_config(str(path)).detector_config().frame_size == 512

    def test_conversation_config_built(self):
        conversation = YoConfig(**DEFAULT_CONFIG).conversation_config()

        assert conversation.wake_window_seconds == 2.0
        assert conversation.listen_window_seconds == 5.0
        assert conversation.debug_dump_dir is None


class TestAudioHelpers:
    """Test audio file helpers."""

    def test_save_wav(self, tmp_path):
        from scipy.io import wavfile
        from core.audio.wav import save_wav

        path = tmp_path / "dump" / "input.wav"
        save_wav(np.array([0.0, 0.5, -0.5], dtype=np.float32), str(path))

        rate, data = wavfile.read(path)
        assert rate == 16000
        assert data.dtype == np.int16
        assert len(data) == 3


@pytest.mark.performance
class TestPerformanceRequirements:
    """Test that performance requirements are met."""

    def test_event_creation_speed(self):
        """Test event creation is fast enough."""
        start_time = time.time()

        # Create many events quickly
        for i in range(1000):
            TranscriptEvent(text=f"test message {i}", stage="command", timestamp=time.time())

        elapsed = time.time() - start_time
        assert elapsed < 0.1  # Should create 1000 events in under 100ms

    def test_metrics_recording_speed(self):
        """Test metrics recording is fast enough."""
        collector = MetricsCollector()
        start_time = time.time()

        # Record many metrics quickly
        for i in range(1000):
            collector.record_timing("test", 0.5)

        elapsed = time.time() - start_time
        assert elapsed < 0.1  # Should record 1000 metrics in under 100ms
