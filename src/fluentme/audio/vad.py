from typing import Optional

import numpy as np

from fluentme.config import Config, cfg
from fluentme.models import AudioFrame


def rms(samples: np.ndarray) -> float:
    """Root-mean-square amplitude of a buffer; 0.0 for an empty one."""
    n = len(samples)
    if n == 0:
        return 0.0
    if samples.dtype.kind != "f":
        samples = samples.astype(np.float32)
    # dot product keeps this O(n) without a squared temporary
    return float(np.sqrt(np.dot(samples, samples) / n))


class FrameClassifier:
    """
    Energy-threshold voice activity detection.

    Called once per capture buffer from the audio callback, so it only
    computes RMS and builds one AudioFrame. Frames are stamped from a
    sample clock unless the caller passes an explicit time.
    """

    def __init__(self, threshold: Optional[float] = None, sample_rate: Optional[int] = None,
                 config: Config = cfg):
        self.threshold = config.silence_threshold if threshold is None else threshold
        self.sample_rate = config.sample_rate if sample_rate is None else sample_rate
        self.samples_seen = 0
        self.frames_seen = 0

    @property
    def elapsed_s(self) -> float:
        return self.samples_seen / self.sample_rate

    @property
    def mean_frame_duration_s(self) -> float:
        """Average duration of the buffers classified so far."""
        if self.frames_seen == 0:
            return 0.0
        return self.elapsed_s / self.frames_seen

    def classify(self, samples: np.ndarray, time_s: Optional[float] = None) -> AudioFrame:
        energy = rms(samples)
        if time_s is None:
            time_s = self.elapsed_s
        self.samples_seen += len(samples)
        self.frames_seen += 1
        return AudioFrame(time_s=time_s, energy=energy, voiced=energy >= self.threshold)
