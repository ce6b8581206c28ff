"""Composite 0-100 fluency score."""
import math
from typing import Optional

from fluentme.config import Config, cfg
from fluentme.models import round_half_up


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def _usable(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


class FluencyScorer:
    """
    Weighted blend of four sub-scores, each in [0, 1] where 1 is best:

    * wpm: distance of the speaking rate from the ideal rate
    * pause: share of speaking time spent in long pauses
    * stutter: stutter-like events per word
    * speaking: speaking time over total duration

    An input that is unavailable (None) zeroes its sub-score. Weights and
    targets come from Config.
    """

    def __init__(self, config: Config = cfg):
        self.config = config

    def wpm_score(self, wpm: Optional[float]) -> float:
        if not _usable(wpm):
            return 0.0
        c = self.config
        return _clamp(1 - min(1.0, abs(wpm - c.ideal_wpm) / c.wpm_tolerance))

    def pause_score(self, pause_count: Optional[int], avg_pause_s: Optional[float],
                    speaking_s: Optional[float]) -> float:
        if not (_usable(pause_count) and _usable(avg_pause_s)):
            return 0.0
        speaking = speaking_s if _usable(speaking_s) else 0.0
        paused = pause_count * avg_pause_s
        return _clamp(1 - min(1.0, paused / max(self.config.min_speaking_s, speaking)))

    def stutter_score(self, stutter_count: Optional[int], word_count: Optional[int]) -> float:
        if not _usable(stutter_count):
            return 0.0
        words = word_count if _usable(word_count) else 0
        return _clamp(1 - min(1.0, stutter_count / max(1, words)))

    def speaking_score(self, speaking_s: Optional[float], duration_s: Optional[float]) -> float:
        if not _usable(speaking_s):
            return 0.0
        duration = duration_s if _usable(duration_s) else 0.0
        return _clamp(speaking_s / max(self.config.min_duration_s, duration))

    def score(
        self,
        wpm: Optional[float],
        speaking_s: Optional[float],
        duration_s: Optional[float],
        pause_count: Optional[int],
        avg_pause_s: Optional[float],
        stutter_count: Optional[int],
        word_count: Optional[int],
    ) -> int:
        c = self.config
        blended = (
            c.weight_wpm * self.wpm_score(wpm)
            + c.weight_stutter * self.stutter_score(stutter_count, word_count)
            + c.weight_pause * self.pause_score(pause_count, avg_pause_s, speaking_s)
            + c.weight_speaking * self.speaking_score(speaking_s, duration_s)
        )
        return max(0, min(100, round_half_up(blended * 100)))
