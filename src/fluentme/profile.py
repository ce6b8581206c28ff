"""
Persisted per-profile state: per-skill scores and the rolling overview.

The on-disk format is one JSON document holding two keyed records:

    {"scores": {"read": 83, "word": 0, ...},
     "overview": {"samples": 3, "timeSpentSeconds": 41, "accuracy": 92.0,
                  "fluency": 80.0, "maxStutterLikelihood": 0.1, "streak": 0}}

Malformed records are reset to defaults on load.
"""
import json
import logging
import math
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from fluentme.errors import CorruptPersistedState
from fluentme.models import FluencyMetrics, SkillType, round_half_up

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return (_is_int(value) or isinstance(value, float)) and math.isfinite(value)


@dataclass
class Scores:
    values: Dict[SkillType, int] = field(default_factory=lambda: {s: 0 for s in SkillType})

    def get(self, skill: SkillType) -> int:
        return self.values.get(skill, 0)

    def set(self, skill: SkillType, value: int):
        self.values[skill] = max(0, min(100, value))

    def to_dict(self) -> Dict[str, int]:
        return {s.value: self.get(s) for s in SkillType}

    @classmethod
    def from_dict(cls, data: Any) -> "Scores":
        if not isinstance(data, dict):
            raise CorruptPersistedState(f"scores must be an object, got {type(data).__name__}")
        scores = cls()
        for skill in SkillType:
            if skill.value not in data:
                continue
            value = data[skill.value]
            if not _is_int(value) or not 0 <= value <= 100:
                raise CorruptPersistedState(f"scores.{skill.value} is not an integer 0-100: {value!r}")
            scores.values[skill] = value
        return scores


@dataclass
class SessionOverview:
    samples: int = 0
    time_spent_s: int = 0
    accuracy: float = 0.0               # rolling mean, percent
    fluency: float = 0.0                # rolling mean, 0-100
    max_stutter_likelihood: float = 0.0
    streak: int = 0

    # attribute -> persisted key, expected to be an integer
    _FIELDS = {
        "samples": ("samples", True),
        "time_spent_s": ("timeSpentSeconds", True),
        "accuracy": ("accuracy", False),
        "fluency": ("fluency", False),
        "max_stutter_likelihood": ("maxStutterLikelihood", False),
        "streak": ("streak", True),
    }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, (key, _) in self._FIELDS.items()}

    @classmethod
    def from_dict(cls, data: Any) -> "SessionOverview":
        if not isinstance(data, dict):
            raise CorruptPersistedState(f"overview must be an object, got {type(data).__name__}")
        overview = cls()
        for attr, (key, integral) in cls._FIELDS.items():
            if key not in data:
                continue
            value = data[key]
            valid = _is_int(value) if integral else _is_number(value)
            if not valid or value < 0:
                raise CorruptPersistedState(f"overview.{key} is malformed: {value!r}")
            setattr(overview, attr, value if integral else float(value))
        return overview


@dataclass
class Profile:
    scores: Scores = field(default_factory=Scores)
    overview: SessionOverview = field(default_factory=SessionOverview)

    def to_dict(self) -> Dict[str, Any]:
        return {"scores": self.scores.to_dict(), "overview": self.overview.to_dict()}


class ProfileStore:
    """JSON file holding one Profile. Writes go through a temp file and os.replace."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.lock = threading.Lock()

    def _decode(self, name: str, decoder, raw: Any, default):
        try:
            return decoder(raw)
        except CorruptPersistedState as e:
            logger.warning("Resetting corrupt %s record in %s: %s", name, self.path, e)
            return default()

    def load(self) -> Profile:
        with self.lock:
            if not self.path.exists():
                return Profile()
            try:
                document = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Resetting unreadable profile %s: %s", self.path, e)
                return Profile()

        if not isinstance(document, dict):
            logger.warning("Resetting profile %s: top level is not an object", self.path)
            return Profile()

        scores = Scores()
        if "scores" in document:
            scores = self._decode("scores", Scores.from_dict, document["scores"], Scores)
        overview = SessionOverview()
        if "overview" in document:
            overview = self._decode("overview", SessionOverview.from_dict, document["overview"], SessionOverview)
        return Profile(scores=scores, overview=overview)

    def save(self, profile: Profile):
        payload = json.dumps(profile.to_dict(), indent=2)
        with self.lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".profile-", suffix=".json", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise


def fold_session(profile: Profile, skill: SkillType, metrics: FluencyMetrics) -> Profile:
    """Apply one finished session to profile in place and return it."""
    profile.scores.set(skill, round_half_up(metrics.fluency_score))

    overview = profile.overview
    overview.samples += 1
    n = overview.samples
    overview.time_spent_s += round_half_up(metrics.duration_s)

    accuracy = metrics.accuracy_percent if metrics.accuracy_percent is not None else 0
    overview.accuracy = overview.accuracy * (n - 1) / n + accuracy / n
    overview.fluency = overview.fluency * (n - 1) / n + metrics.fluency_score / n

    overview.max_stutter_likelihood = max(overview.max_stutter_likelihood, metrics.stutter_likelihood)
    # streak is carried forward unchanged
    return profile


class SessionAggregator:
    """
    Folds completed sessions into the stored profile.

    Must be called exactly once per completed session; cancelled takes
    never reach it.
    """

    def __init__(self, store: ProfileStore):
        self.store = store

    def record(self, skill: SkillType, metrics: FluencyMetrics) -> Profile:
        profile = fold_session(self.store.load(), skill, metrics)
        self.store.save(profile)
        logger.info(
            "Recorded %s session: score=%d samples=%d fluency=%.1f accuracy=%.1f",
            skill.value, metrics.fluency_score, profile.overview.samples,
            profile.overview.fluency, profile.overview.accuracy,
        )
        return profile
