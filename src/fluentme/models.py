import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values, unlike round()."""
    return int(math.floor(value + 0.5))


class SkillType(str, Enum):
    READ = "read"
    WORD = "word"
    TONGUE = "tongue"
    QUESTION = "question"
    PHOTO = "photo"
    NUMBERS = "numbers"


class DisfluencyKind(str, Enum):
    REPETITION = "repetition"
    PREFIX_REPEAT = "prefix_repeat"
    PROLONGATION = "prolongation"


@dataclass
class AudioFrame:
    time_s: float        # offset from session start
    energy: float        # RMS of the buffer, linear amplitude
    voiced: bool


@dataclass
class PauseSegment:
    start_s: float
    end_s: float
    duration_s: float


@dataclass
class PauseStats:
    pauses: List[PauseSegment]
    count: int
    avg_duration_s: float

    @property
    def total_s(self) -> float:
        return sum(p.duration_s for p in self.pauses)


@dataclass
class DisfluencyEvent:
    kind: DisfluencyKind
    token_index: int
    token: str
    prev_token: Optional[str] = None


@dataclass
class AlignmentResult:
    edit_distance: int
    reference_length: int
    wer: float           # capped at 1.0

    @property
    def accuracy_percent(self) -> int:
        return max(0, round_half_up((1 - self.wer) * 100))


@dataclass(frozen=True)
class FluencyMetrics:
    duration_s: float
    speaking_s: float
    pause_count: int
    avg_pause_s: float
    fluency_score: int
    # None when no transcript was available
    word_count: Optional[int] = None
    wpm: Optional[int] = None
    stutter_count: Optional[int] = None
    wer: Optional[float] = None

    @property
    def wer_percent(self) -> Optional[float]:
        if self.wer is None:
            return None
        return round(self.wer * 100, 1)

    @property
    def accuracy_percent(self) -> Optional[int]:
        if self.wer is None:
            return None
        return max(0, round_half_up((1 - self.wer) * 100))

    @property
    def stutter_likelihood(self) -> float:
        if not self.stutter_count:
            return 0.0
        return self.stutter_count / max(1, self.word_count or 0)

    @property
    def stutter_percent(self) -> Optional[float]:
        """Share of words flagged as stutter-like, one decimal."""
        if self.stutter_count is None:
            return None
        return round(self.stutter_likelihood * 100, 1)


@dataclass(frozen=True)
class Prompt:
    instruction: str
    text: str


@dataclass
class TranscriptUpdate:
    text: str
    is_final: bool
    ts: float = 0.0      # seconds since session start


@dataclass
class SessionResult:
    skill: SkillType
    prompt: Prompt
    transcript: Optional[str]
    metrics: FluencyMetrics
    pauses: PauseStats
    disfluencies: List[DisfluencyEvent] = field(default_factory=list)
    alignment: Optional[AlignmentResult] = None
    recording_path: Optional[str] = None
