"""
Single analysis pass over one finished take.

Runs after capture has stopped, on the frozen frame history and the
transcript snapshot, and produces the FluencyMetrics the profile is
updated from.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from fluentme.analysis.alignment import align_tokens
from fluentme.analysis.disfluency import DisfluencyDetector
from fluentme.analysis.pauses import PauseAnalyzer
from fluentme.analysis.scoring import FluencyScorer
from fluentme.analysis.text import tokenize
from fluentme.config import Config, cfg
from fluentme.models import (
    AlignmentResult,
    AudioFrame,
    DisfluencyEvent,
    FluencyMetrics,
    PauseStats,
    round_half_up,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionAnalysis:
    metrics: FluencyMetrics
    pauses: PauseStats
    disfluencies: List[DisfluencyEvent] = field(default_factory=list)
    alignment: Optional[AlignmentResult] = None


def speaking_time(frames: Sequence[AudioFrame], frame_duration_s: float) -> float:
    return sum(1 for f in frames if f.voiced) * frame_duration_s


def words_per_minute(word_count: int, speaking_s: float) -> int:
    if speaking_s <= 0:
        return 0
    return round_half_up(word_count / (speaking_s / 60.0))


def analyze_session(
    frames: Sequence[AudioFrame],
    frame_duration_s: float,
    duration_s: float,
    transcript: Optional[str],
    reference: str = "",
    config: Config = cfg,
) -> SessionAnalysis:
    """
    Args:
        frames: Frame history, oldest first
        frame_duration_s: Length of one frame, from buffer size and sample rate
        duration_s: Wall time between start and stop
        transcript: Recognized text; None when recognition was unavailable
        reference: Prompt text the user was asked to say

    Returns:
        SessionAnalysis with metrics and the intermediate results
    """
    speaking_s = speaking_time(frames, frame_duration_s)
    pauses = PauseAnalyzer(config=config).analyze(frames)

    word_count = wpm = stutter_count = None
    wer = None
    disfluencies: List[DisfluencyEvent] = []
    alignment: Optional[AlignmentResult] = None

    if transcript is not None:
        tokens = tokenize(transcript)
        word_count = len(tokens)
        wpm = words_per_minute(word_count, speaking_s)
        disfluencies = DisfluencyDetector().detect_tokens(tokens)
        stutter_count = len(disfluencies)

        ref_tokens = tokenize(reference)
        if ref_tokens:
            alignment = align_tokens(ref_tokens, tokens)
            wer = alignment.wer
    else:
        logger.info("No transcript; word, rate, stutter and WER metrics unavailable")

    score = FluencyScorer(config).score(
        wpm=wpm,
        speaking_s=speaking_s,
        duration_s=duration_s,
        pause_count=pauses.count,
        avg_pause_s=pauses.avg_duration_s,
        stutter_count=stutter_count,
        word_count=word_count,
    )

    metrics = FluencyMetrics(
        duration_s=duration_s,
        speaking_s=speaking_s,
        pause_count=pauses.count,
        avg_pause_s=pauses.avg_duration_s,
        fluency_score=score,
        word_count=word_count,
        wpm=wpm,
        stutter_count=stutter_count,
        wer=wer,
    )
    logger.debug("Session metrics: %s", metrics)
    return SessionAnalysis(metrics=metrics, pauses=pauses, disfluencies=disfluencies, alignment=alignment)
