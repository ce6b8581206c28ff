from typing import List

from fluentme.models import SessionResult, SkillType
from fluentme.profile import Profile

DASH = "—"


def format_result(result: SessionResult) -> str:
    m = result.metrics
    words = DASH if m.word_count is None else str(m.word_count)
    wpm = DASH if m.wpm is None else str(m.wpm)
    if m.stutter_count is None:
        stutters = DASH
    else:
        stutters = f"{m.stutter_count} ({m.stutter_percent}%)"
    accuracy = DASH if m.wer is None else f"{m.accuracy_percent}% (WER {m.wer_percent:.1f}%)"

    lines: List[str] = [
        f"Transcript: {result.transcript or DASH}",
        f"Duration: {m.duration_s:.1f}s",
        f"Speaking: {m.speaking_s:.1f}s",
        f"Words: {words}",
        f"WPM: {wpm}",
        f"Pauses: {m.pause_count} (avg {m.avg_pause_s:.2f}s)",
        f"Stutter-like events: {stutters}",
        f"Accuracy: {accuracy}",
        f"Fluency: {m.fluency_score} / 100",
    ]
    if result.recording_path:
        lines.append(f"Recording: {result.recording_path}")
    return "\n".join(lines)


def format_overview(profile: Profile) -> str:
    o = profile.overview
    lines = ["Scores:"]
    for skill in SkillType:
        lines.append(f"  {skill.value:<9} {profile.scores.get(skill):>3}")
    lines += [
        "Overview:",
        f"  Samples: {o.samples}",
        f"  Time spent: {o.time_spent_s}s",
        f"  Accuracy: {o.accuracy:.1f}%",
        f"  Fluency: {o.fluency:.1f} / 100",
        f"  Max stutter likelihood: {o.max_stutter_likelihood * 100:.1f}%",
        f"  Streak: {o.streak}",
    ]
    return "\n".join(lines)
