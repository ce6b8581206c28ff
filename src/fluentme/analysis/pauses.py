"""Pause segmentation over a voiced/unvoiced frame sequence."""
from typing import Iterable, List, Optional

from fluentme.config import Config, cfg
from fluentme.models import AudioFrame, PauseSegment, PauseStats


class PauseAnalyzer:
    def __init__(self, min_pause_s: Optional[float] = None, config: Config = cfg):
        self.min_pause_s = config.min_pause_s if min_pause_s is None else min_pause_s

    def _close(self, pauses: List[PauseSegment], start_s: float, end_s: float):
        duration = end_s - start_s
        if duration >= self.min_pause_s:
            pauses.append(PauseSegment(start_s=start_s, end_s=end_s, duration_s=duration))

    def analyze(self, frames: Iterable[AudioFrame]) -> PauseStats:
        """
        Single left-to-right scan. A silence run starts at its first unvoiced
        frame and ends at the next voiced frame; a run still open when the
        frames run out is closed at the last frame's time.
        """
        pauses: List[PauseSegment] = []
        in_silence = False
        silence_start = 0.0
        last: Optional[AudioFrame] = None

        for frame in frames:
            if not frame.voiced and not in_silence:
                in_silence = True
                silence_start = frame.time_s
            elif frame.voiced and in_silence:
                in_silence = False
                self._close(pauses, silence_start, frame.time_s)
            last = frame

        if in_silence and last is not None:
            self._close(pauses, silence_start, last.time_s)

        avg = sum(p.duration_s for p in pauses) / len(pauses) if pauses else 0.0
        return PauseStats(pauses=pauses, count=len(pauses), avg_duration_s=avg)
