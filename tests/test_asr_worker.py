import threading
import time
import unittest
from unittest import mock

import numpy as np

from fluentme.asr.transcript import TranscriptBuffer
from fluentme.asr.worker import WhisperRecognizer
from fluentme.config import Config
from fluentme.errors import RecognitionUnavailable
from fluentme.models import Prompt, SkillType
from fluentme.ring_buffer import RingBuffer
from fluentme.session import PracticeSession

RATE = 16000
BLOCK = 1600


class Segment:
    def __init__(self, text):
        self.text = text


class WordPerSecondModel:
    """Stands in for WhisperModel: one word per full second of audio."""

    def __init__(self):
        self.hold = threading.Event()
        self.release = threading.Event()
        self.fail_on_length = None

    def transcribe(self, audio, **kwargs):
        if self.hold.is_set():
            self.release.wait(5)
        if self.fail_on_length is not None and len(audio) == self.fail_on_length:
            raise RuntimeError("decoder crashed")
        words = " ".join(["word"] * (len(audio) // RATE))
        return iter([Segment(" " + words)]), None


class BlockSource:
    sample_rate = RATE
    blocksize = BLOCK

    def __init__(self):
        self.sink = None

    def start(self, sink):
        self.sink = sink

    def feed_voiced(self, seconds):
        block = np.full(BLOCK, 0.1, dtype=np.float32)
        for _ in range(int(seconds * RATE / BLOCK)):
            self.sink(block)

    def stop(self):
        self.sink = None


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def voiced_audio(seconds, size_s=60):
    audio = RingBuffer(size_samples=size_s * RATE)
    audio.write(np.full(int(seconds * RATE), 0.1, dtype=np.float32))
    return audio


class TestWhisperRecognizer(unittest.TestCase):
    def setUp(self):
        self.config = Config(
            sample_rate=RATE,
            asr_decode_window_s=20,
            asr_update_interval_s=0.01,
            asr_min_audio_s=0.5,
            finalize_timeout_s=0.2,
            recordings_dir=None,
        )
        self.model = WordPerSecondModel()
        patcher = mock.patch("fluentme.asr.worker.WhisperModel", return_value=self.model)
        self.model_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.recognizer = WhisperRecognizer(self.config)

    def tearDown(self):
        self.model.release.set()
        self.recognizer.stop()
        self.recognizer.wait_final(2)

    def test_model_loaded_once(self):
        buf = TranscriptBuffer()
        self.recognizer.start(voiced_audio(1), buf.push)
        self.recognizer.stop()
        self.assertTrue(self.recognizer.wait_final(2))
        self.recognizer.start(voiced_audio(1), buf.push)
        self.assertEqual(self.model_cls.call_count, 1)

    def test_load_failure_is_recognition_unavailable(self):
        self.model_cls.side_effect = RuntimeError("no weights")
        with self.assertRaises(RecognitionUnavailable):
            self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
        self.assertFalse(self.recognizer.running)

    def test_interim_then_final(self):
        buf = TranscriptBuffer()
        self.recognizer.start(voiced_audio(3), buf.push)
        self.assertTrue(wait_until(lambda: buf.interim == "word word word"))
        self.recognizer.stop()
        self.assertTrue(self.recognizer.wait_final(2))
        self.assertEqual(buf.final_parts, ["word word word"])
        self.assertEqual(buf.interim, "")
        self.assertFalse(self.recognizer.failed)

    def test_audio_past_the_window_is_committed(self):
        buf = TranscriptBuffer()
        self.recognizer.start(voiced_audio(45), buf.push)
        self.assertTrue(wait_until(lambda: len(buf.final_parts) == 2 and buf.interim))
        self.assertEqual([len(p.split()) for p in buf.final_parts], [20, 20])
        self.assertEqual(len(buf.interim.split()), 5)

        self.recognizer.stop()
        self.assertTrue(self.recognizer.wait_final(2))
        self.assertEqual(len(buf.snapshot().split()), 45)

    def test_engine_error_marks_failed(self):
        self.model.fail_on_length = RATE
        with self.assertLogs("fluentme.asr.worker", level="ERROR"):
            self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
            self.assertTrue(self.recognizer.wait_final(2))
        self.assertTrue(self.recognizer.failed)

    def test_stale_run_does_not_fail_next_run(self):
        self.model.hold.set()
        self.model.fail_on_length = RATE
        self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
        first = self.recognizer.thread
        self.recognizer.stop()
        self.assertFalse(self.recognizer.wait_final(0.05))

        buf = TranscriptBuffer()
        self.recognizer.start(voiced_audio(2), buf.push)
        self.assertIsNot(self.recognizer.thread, first)
        self.model.hold.clear()
        self.model.release.set()
        first.join(2)
        self.assertFalse(first.is_alive())
        self.assertFalse(self.recognizer.failed)

        self.recognizer.stop()
        self.assertTrue(self.recognizer.wait_final(2))
        self.assertEqual(buf.snapshot(), "word word")

    def test_start_while_running_is_ignored(self):
        self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
        thread = self.recognizer.thread
        self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
        self.assertIs(self.recognizer.thread, thread)

    def test_stop_while_idle(self):
        self.recognizer.stop()
        self.assertTrue(self.recognizer.wait_final(0.1))
        self.assertFalse(self.recognizer.failed)

    def test_wait_final_times_out(self):
        self.model.hold.set()
        self.recognizer.start(voiced_audio(1), TranscriptBuffer().push)
        self.recognizer.stop()
        with self.assertLogs("fluentme.asr.worker", level="WARNING"):
            self.assertFalse(self.recognizer.wait_final(0.05))

    def test_long_take_with_slow_final_keeps_early_words(self):
        source = BlockSource()
        clock = iter([0.0, 40.0])
        session = PracticeSession(
            SkillType.READ,
            Prompt("Read this aloud:", "Practice makes perfect."),
            source,
            self.recognizer,
            None,
            Config(sample_rate=RATE, capture_blocksize=BLOCK, asr_decode_window_s=20,
                   asr_update_interval_s=0.01, finalize_timeout_s=0.2, recordings_dir=None),
            clock=lambda: next(clock),
        )
        self.recognizer.config = session.config
        session.start()
        source.feed_voiced(40)
        transcript = session.context.transcript
        self.assertTrue(wait_until(lambda: len(transcript.snapshot().split()) == 40))

        # the decode after stop never finishes within finalize_timeout_s
        self.model.hold.set()
        with self.assertLogs("fluentme.asr.worker", level="WARNING"):
            result = session.stop()
        self.assertEqual(result.metrics.word_count, 40)
        self.assertEqual(result.metrics.wpm, 60)


if __name__ == '__main__':
    unittest.main()
