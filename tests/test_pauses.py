import unittest
from typing import List

from fluentme.analysis.pauses import PauseAnalyzer
from fluentme.models import AudioFrame

FRAME_S = 0.03


def make_frames(pattern: str, dt: float = FRAME_S) -> List[AudioFrame]:
    """'v' = voiced frame, '.' = silent frame."""
    return [AudioFrame(time_s=i * dt, energy=0.1 if c == "v" else 0.0, voiced=c == "v")
            for i, c in enumerate(pattern)]


class TestPauseAnalyzer(unittest.TestCase):
    def setUp(self):
        self.analyzer = PauseAnalyzer(min_pause_s=0.25)

    def test_single_mid_session_pause(self):
        stats = self.analyzer.analyze(make_frames("v" * 45 + "." * 10 + "v" * 45))
        self.assertEqual(stats.count, 1)
        self.assertAlmostEqual(stats.avg_duration_s, 0.30, places=6)
        self.assertAlmostEqual(stats.pauses[0].start_s, 1.35, places=6)
        self.assertAlmostEqual(stats.pauses[0].end_s, 1.65, places=6)

    def test_short_silence_ignored(self):
        stats = self.analyzer.analyze(make_frames("vvvv" + "." * 5 + "vvvv"))
        self.assertEqual(stats.count, 0)
        self.assertEqual(stats.avg_duration_s, 0.0)

    def test_trailing_silence_closed_at_last_frame(self):
        stats = self.analyzer.analyze(make_frames("vv.....", dt=0.1))
        self.assertEqual(stats.count, 1)
        self.assertAlmostEqual(stats.pauses[0].duration_s, 0.4, places=6)

    def test_leading_silence_counts(self):
        stats = self.analyzer.analyze(make_frames("....v", dt=0.1))
        self.assertEqual(stats.count, 1)
        self.assertAlmostEqual(stats.pauses[0].duration_s, 0.4, places=6)

    def test_average_of_several_pauses(self):
        stats = self.analyzer.analyze(make_frames("v...v.....v", dt=0.1))
        self.assertEqual(stats.count, 2)
        self.assertAlmostEqual(stats.avg_duration_s, 0.4, places=6)
        self.assertAlmostEqual(stats.total_s, 0.8, places=6)

    def test_empty(self):
        stats = self.analyzer.analyze([])
        self.assertEqual(stats.count, 0)
        self.assertEqual(stats.pauses, [])
        self.assertEqual(stats.avg_duration_s, 0.0)

    def test_all_pauses_meet_threshold(self):
        stats = self.analyzer.analyze(make_frames("v.v..v...v....v.........v......"))
        for pause in stats.pauses:
            self.assertGreaterEqual(pause.duration_s, 0.25)

    def test_adding_silence_never_reduces_pauses(self):
        pattern = "vvv..vvv" + "." * 3
        prev_count, prev_total = 0, 0.0
        for extra in range(20):
            stats = self.analyzer.analyze(make_frames(pattern + "." * extra))
            self.assertGreaterEqual(stats.count, prev_count)
            self.assertGreaterEqual(stats.total_s, prev_total)
            prev_count, prev_total = stats.count, stats.total_s


if __name__ == '__main__':
    unittest.main()
