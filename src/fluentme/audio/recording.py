from pathlib import Path

import numpy as np
import scipy.io.wavfile as wavfile


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    clipped = np.clip(samples, -1.0, 1.0)
    return (clipped * 32767.0).astype(np.int16)


def save_recording(path: str | Path, samples: np.ndarray, sample_rate: int) -> Path:
    """Write a take as 16-bit mono PCM WAV and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wavfile.write(str(path), sample_rate, to_pcm16(samples))
    return path
