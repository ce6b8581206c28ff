"""
One practice take: capture, stop, analyze, record.

A PracticeSession owns a CaptureContext for as long as it is capturing.
The audio producer and the transcript producer only append to the
context's buffers; analysis runs once, after stop(), over the frozen
buffers. cancel() throws the buffers away without touching the profile.
"""
import logging
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

import numpy as np

from fluentme.analysis.pipeline import analyze_session
from fluentme.asr.transcript import TranscriptBuffer
from fluentme.audio.recording import save_recording
from fluentme.audio.vad import FrameClassifier
from fluentme.config import Config, cfg
from fluentme.errors import DeviceUnavailable, RecognitionUnavailable
from fluentme.models import Prompt, SessionResult, SkillType, TranscriptUpdate
from fluentme.profile import SessionAggregator
from fluentme.ring_buffer import FrameRingBuffer, RingBuffer

logger = logging.getLogger(__name__)


class AudioSource(Protocol):
    sample_rate: int
    blocksize: int

    def start(self, sink: Callable[[np.ndarray], None]) -> None: ...

    def stop(self) -> None: ...


class Recognizer(Protocol):
    @property
    def failed(self) -> bool: ...

    def start(self, audio: RingBuffer, sink: Callable[[TranscriptUpdate], None]) -> None: ...

    def stop(self) -> None: ...

    def wait_final(self, timeout: float) -> bool: ...


class SessionState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class CaptureContext:
    """Buffers for a single take. Created on start, dropped on stop/cancel."""

    def __init__(self, sample_rate: int, blocksize: int, config: Config = cfg):
        self.sample_rate = sample_rate
        self.blocksize = blocksize
        self.classifier = FrameClassifier(sample_rate=sample_rate, config=config)
        max_frames = int(config.max_session_s * sample_rate / blocksize) + 1
        self.frames = FrameRingBuffer(max_frames)
        self.audio = RingBuffer(size_samples=int(config.max_session_s * sample_rate))
        self.transcript = TranscriptBuffer()

    def on_audio(self, samples: np.ndarray):
        """Audio callback sink: one RMS, two appends."""
        self.frames.append(self.classifier.classify(samples))
        self.audio.write(samples)

    def on_transcript(self, update: TranscriptUpdate):
        self.transcript.push(update)

    @property
    def frame_duration_s(self) -> float:
        measured = self.classifier.mean_frame_duration_s
        return measured if measured > 0 else self.blocksize / self.sample_rate


class PracticeSession:
    def __init__(
        self,
        skill: SkillType,
        prompt: Prompt,
        audio_source: AudioSource,
        recognizer: Optional[Recognizer] = None,
        aggregator: Optional[SessionAggregator] = None,
        config: Config = cfg,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.skill = skill
        self.prompt = prompt
        self.audio_source = audio_source
        self.recognizer = recognizer
        self.aggregator = aggregator
        self.config = config
        self.clock = clock

        self.state = SessionState.IDLE
        self.context: Optional[CaptureContext] = None
        self.recognition_active = False
        self.started_at = 0.0

    def start(self):
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Cannot start a session in state {self.state.value}")

        context = CaptureContext(self.audio_source.sample_rate, self.audio_source.blocksize, self.config)
        try:
            self.audio_source.start(context.on_audio)
        except DeviceUnavailable:
            logger.error("Audio capture unavailable; session not started")
            raise
        self.context = context
        self.started_at = self.clock()
        self.state = SessionState.CAPTURING

        if self.recognizer is None:
            logger.info("Transcription unavailable; transcript metrics will be skipped")
            return
        try:
            self.recognizer.start(context.audio, context.on_transcript)
            self.recognition_active = True
        except RecognitionUnavailable as e:
            logger.warning("Continuing without transcription: %s", e)

    def _stop_producers(self, finalize: bool):
        self.audio_source.stop()
        if self.recognition_active:
            self.recognizer.stop()
            if finalize:
                self.recognizer.wait_final(self.config.finalize_timeout_s)
        self.context.transcript.close()

    def _transcript_snapshot(self) -> Optional[str]:
        if not self.recognition_active:
            return None
        text = self.context.transcript.snapshot()
        if self.recognizer.failed and not text:
            logger.warning("Recognition failed without producing text; transcript unavailable")
            return None
        return text

    def _save_recording(self) -> Optional[str]:
        recordings_dir = self.config.recordings_dir
        if not recordings_dir:
            return None
        name = f"recording-{self.skill.value}-{datetime.now().strftime('%Y%m%d-%H%M%S')}.wav"
        try:
            path = save_recording(Path(recordings_dir) / name, self.context.audio.get_all(), self.context.sample_rate)
        except OSError as e:
            logger.warning("Could not save recording: %s", e)
            return None
        logger.info("Saved recording to %s", path)
        return str(path)

    def stop(self) -> SessionResult:
        """
        Stop capture and score the take.

        Order: audio off and device released, recognizer told to finalize,
        bounded wait for its final result, then analysis on whatever
        transcript text is there.
        """
        if self.state is not SessionState.CAPTURING:
            raise RuntimeError(f"Cannot stop a session in state {self.state.value}")

        duration_s = max(0.0, self.clock() - self.started_at)
        try:
            self._stop_producers(finalize=True)
            transcript = self._transcript_snapshot()
            analysis = analyze_session(
                frames=self.context.frames.frames(),
                frame_duration_s=self.context.frame_duration_s,
                duration_s=duration_s,
                transcript=transcript,
                reference=self.prompt.text,
                config=self.config,
            )
            result = SessionResult(
                skill=self.skill,
                prompt=self.prompt,
                transcript=transcript,
                metrics=analysis.metrics,
                pauses=analysis.pauses,
                disfluencies=analysis.disfluencies,
                alignment=analysis.alignment,
                recording_path=self._save_recording(),
            )
        finally:
            self.context = None
            self.state = SessionState.FINISHED

        if self.aggregator is not None:
            self.aggregator.record(self.skill, result.metrics)
        return result

    def cancel(self):
        """Abort the take: producers stopped, buffers dropped, profile untouched."""
        if self.state is not SessionState.CAPTURING:
            return
        try:
            self._stop_producers(finalize=False)
        finally:
            self.context = None
            self.state = SessionState.CANCELLED
        logger.info("Session cancelled")
