"""
Performance metrics and timing utilities for the conversation loop.

Provides a context manager for timing pipeline stages and a summary table.
The loop runs unattended, so only the most recent timings and threshold
warnings are kept.
"""
import time
import logging
from contextlib import contextmanager
from typing import Deque, Dict, Optional
from dataclasses import dataclass
from collections import defaultdict, deque

DEFAULT_MAX_SAMPLES = 1000  # per stage
DEFAULT_MAX_WARNINGS = 100


@dataclass
class TimingStats:
    """Statistics for a timed operation over the retained samples."""
    stage: str
    count: int
    total_time: float
    avg_time: float
    min_time: float
    max_time: float
    last_time: float


class MetricsCollector:
    """Collects and analyzes performance metrics."""

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES,
                 max_warnings: int = DEFAULT_MAX_WARNINGS):
        if max_samples < 1 or max_warnings < 1:
            raise ValueError("metrics caps must be positive")
        self.max_samples = max_samples
        self.timings: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=self.max_samples))
        self.thresholds: Dict[str, float] = {
            "condition": 0.05,   # 50ms
            "vad": 0.05,         # 50ms
            "stt": 1.0,          # 1s
            "llm": 5.0,          # 5s
            "tts": 10.0,         # whole reply, including playback
        }
        self.warnings: Deque[str] = deque(maxlen=max_warnings)
        self.warning_count = 0

    def record_timing(self, stage: str, duration: float) -> None:
        """Record a timing measurement."""
        self.timings[stage].append(duration)

        threshold = self.thresholds.get(stage)
        if threshold and duration > threshold:
            warning = f"{stage} exceeded threshold: {duration:.3f}s > {threshold}s"
            self.warnings.append(warning)
            self.warning_count += 1
            logging.warning(warning)

    def get_stats(self, stage: str) -> Optional[TimingStats]:
        """Get statistics for a specific stage."""
        times = self.timings.get(stage)
        if not times:
            return None

        return TimingStats(
            stage=stage,
            count=len(times),
            total_time=sum(times),
            avg_time=sum(times) / len(times),
            min_time=min(times),
            max_time=max(times),
            last_time=times[-1]
        )

    def log_summary(self) -> None:
        """Print a summary table of all timing stats."""
        print("\n" + "="*70)
        print("PERFORMANCE METRICS SUMMARY")
        print("="*70)
        print(f"{'Stage':<15} {'Count':<6} {'Avg':<8} {'Min':<8} {'Max':<8} {'Last':<8}")
        print("-" * 70)

        for stage in sorted(self.timings.keys()):
            stats = self.get_stats(stage)
            if stats:
                print(f"{stage:<15} {stats.count:<6} "
                      f"{stats.avg_time*1000:>6.0f}ms {stats.min_time*1000:>6.0f}ms "
                      f"{stats.max_time*1000:>6.0f}ms {stats.last_time*1000:>6.0f}ms")

        if self.warning_count:
            print(f"\n{self.warning_count} threshold violations, most recent:")
            for warning in list(self.warnings)[-10:]:
                print(f"   {warning}")

        print("="*70)

    def clear(self) -> None:
        """Clear all collected metrics."""
        self.timings.clear()
        self.warnings.clear()
        self.warning_count = 0


# Global metrics collector
_metrics = MetricsCollector()


@contextmanager
def timer(stage: str):
    """Context manager for timing operations."""
    start_time = time.time()
    try:
        yield
    finally:
        duration = time.time() - start_time
        _metrics.record_timing(stage, duration)


def log_latency() -> None:
    """Log latency summary table."""
    _metrics.log_summary()
