import logging
import threading
import time
from typing import Callable, Optional

import numpy as np
from faster_whisper import WhisperModel

from fluentme.config import Config, cfg
from fluentme.errors import RecognitionUnavailable
from fluentme.models import TranscriptUpdate
from fluentme.ring_buffer import RingBuffer

logger = logging.getLogger(__name__)

TranscriptSink = Callable[[TranscriptUpdate], None]


class WhisperRecognizer:
    """
    Transcript producer backed by faster-whisper.

    While a session runs, a worker thread decodes the not-yet-committed
    audio every `asr_update_interval_s` and emits it as an interim update.
    Audio that grows past `asr_decode_window_s` is committed window by
    window as final updates, so a long take keeps its early text even if
    the last decode after stop() does not finish in time.
    The model is loaded once and reused across sessions.
    """

    def __init__(self, config: Config = cfg):
        self.config = config
        self.model: Optional[WhisperModel] = None
        self.thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self.error: Optional[Exception] = None

    def _load_model(self):
        if self.model is not None:
            return
        c = self.config
        logger.info("Loading Whisper model: %s on %s...", c.asr_model, c.asr_device)
        try:
            self.model = WhisperModel(c.asr_model, device=c.asr_device, compute_type=c.asr_compute_type)
        except Exception as e:
            raise RecognitionUnavailable(f"Failed to load Whisper model {c.asr_model!r}: {e}") from e
        logger.info("Model loaded.")

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    @property
    def failed(self) -> bool:
        return self.error is not None

    def _transcribe(self, audio: np.ndarray, final: bool) -> str:
        if len(audio) < self.config.asr_min_audio_s * self.config.sample_rate:
            return ""
        segments, _info = self.model.transcribe(
            audio,
            language=self.config.asr_language,
            task="transcribe",
            beam_size=self.config.asr_beam_size_final if final else self.config.asr_beam_size_streaming,
            temperature=0.0,
            # keep disfluencies: no prompt conditioning, no internal VAD trimming
            condition_on_previous_text=False,
            vad_filter=False,
        )
        return " ".join(seg.text.strip() for seg in segments).strip()

    def _commit(self, audio: RingBuffer, sink: TranscriptSink, committed: int, window: int, drain: bool) -> int:
        """
        Decode and emit final text for audio in whole decode windows.

        During capture only audio that has left the decode window is
        committed; with drain=True everything up to the write position is.
        Returns the new commit offset.
        """
        rate = self.config.sample_rate
        while True:
            pending = audio.total_written - committed
            if pending <= 0 or (not drain and pending <= window):
                return committed
            # offsets past the retained history jump to the oldest sample
            committed = max(committed, audio.total_written - len(audio))
            chunk = audio.get_since(committed, window)
            if len(chunk) == 0:
                return committed
            committed += len(chunk)
            text = self._transcribe(chunk, final=True)
            if text:
                sink(TranscriptUpdate(text=text, is_final=True, ts=committed / rate))

    def _run(self, audio: RingBuffer, sink: TranscriptSink, stop_event: threading.Event):
        # everything a run touches is passed in, so a run that is still
        # finalizing never sees the next session's buffers
        rate = self.config.sample_rate
        window = int(self.config.asr_decode_window_s * rate)
        committed = 0
        try:
            while not stop_event.is_set():
                started = time.monotonic()
                committed = self._commit(audio, sink, committed, window, drain=False)
                text = self._transcribe(audio.get_since(committed), final=False)
                if text and not stop_event.is_set():
                    sink(TranscriptUpdate(text=text, is_final=False, ts=audio.total_written / rate))
                elapsed = time.monotonic() - started
                stop_event.wait(max(0.0, self.config.asr_update_interval_s - elapsed))

            self._commit(audio, sink, committed, window, drain=True)
        except Exception as e:
            # engine failures degrade the session to "no transcript"
            logger.error("Recognition failed: %s", e)
            if stop_event is self.stop_event:
                self.error = e

    def start(self, audio: RingBuffer, sink: TranscriptSink):
        if self.running and not self.stop_event.is_set():
            logger.debug("Recognizer already running; start ignored")
            return
        self._load_model()
        self.error = None
        self.stop_event = threading.Event()
        self.thread = threading.Thread(
            target=self._run,
            args=(audio, sink, self.stop_event),
            name="whisper-recognizer",
            daemon=True,
        )
        self.thread.start()

    def stop(self):
        """Ask the worker to finalize. Does not wait; see wait_final()."""
        if self.thread is None:
            return
        self.stop_event.set()

    def wait_final(self, timeout: float) -> bool:
        """Wait up to timeout seconds for the final result. True if it arrived."""
        if self.thread is None:
            return True
        self.thread.join(timeout)
        finished = not self.thread.is_alive()
        if finished:
            self.thread = None
        else:
            logger.warning("Final transcript not ready after %.1fs; using best-effort text", timeout)
        return finished
