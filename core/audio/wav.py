"""
WAV dumps of conditioned capture windows, for debugging recognition issues.
"""

from pathlib import Path
from typing import Union

import numpy as np
from scipy.io import wavfile


def save_wav(samples: np.ndarray, path: Union[str, Path], sample_rate: int = 16000) -> Path:
    """Write mono float samples as 16-bit PCM."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pcm = (np.clip(samples, -1.0, 1.0) * np.iinfo(np.int16).max).astype(np.int16)
    wavfile.write(path, sample_rate, pcm)
    return path
