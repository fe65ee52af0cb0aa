"""
Sample conditioning for captured audio.

Applies a hard noise gate and linearly resamples the stream to the rate the
speech recognizer expects. The interpolant is deliberately cheap: there is no
anti-aliasing filter, so heavy downsampling may alias.
"""

import numpy as np

NOISE_GATE_THRESHOLD = 0.02
TARGET_SAMPLE_RATE = 16000


def apply_noise_gate(samples: np.ndarray, threshold: float = NOISE_GATE_THRESHOLD) -> np.ndarray:
    """
    Zero every sample whose magnitude is below ``threshold``.

    Samples at or above the threshold pass through unchanged. This is a hard
    cutoff with no attack/release smoothing.
    """
    samples = np.asarray(samples, dtype=np.float32)
    # Compare in float32 so a stored 0.02 is not gated by the float64 0.02
    return np.where(np.abs(samples) < np.float32(threshold), np.float32(0.0), samples).astype(np.float32)


def resample_linear(samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    """
    Resample ``samples`` from ``source_rate`` to ``target_rate`` by linear interpolation.

    Output length is ``floor(len * target_rate / source_rate)``, truncated at the
    first position whose left neighbour is the last input sample.

    Args:
        samples: Mono float samples
        source_rate: Rate the samples were captured at
        target_rate: Desired output rate

    Returns:
        Resampled float32 array (the input itself when rates match)
    """
    samples = np.asarray(samples, dtype=np.float32)
    if source_rate == target_rate:
        return samples

    ratio = target_rate / source_rate
    out_len = int(np.floor(len(samples) * ratio))
    if out_len == 0 or len(samples) < 2:
        return np.zeros(0, dtype=np.float32)

    positions = np.arange(out_len, dtype=np.float64) / ratio
    pos_floor = np.floor(positions).astype(np.int64)

    # Positions are monotonic, so the valid ones form a prefix
    valid = int(np.searchsorted(pos_floor, len(samples) - 1, side="left"))
    positions = positions[:valid]
    pos_floor = pos_floor[:valid]
    fract = positions - pos_floor

    left = samples[pos_floor].astype(np.float64)
    right = samples[pos_floor + 1].astype(np.float64)
    return (left * (1.0 - fract) + right * fract).astype(np.float32)


def condition(raw: np.ndarray,
              source_rate: int,
              target_rate: int = TARGET_SAMPLE_RATE,
              gate_threshold: float = NOISE_GATE_THRESHOLD) -> np.ndarray:
    """Noise-gate ``raw`` and resample it to ``target_rate``."""
    gated = apply_noise_gate(raw, gate_threshold)
    return resample_linear(gated, source_rate, target_rate)
