import logging
import threading
from typing import List

from fluentme.models import TranscriptUpdate

logger = logging.getLogger(__name__)


class TranscriptBuffer:
    """
    Session-scoped, append-only transcript.

    Final results accumulate; the latest interim result covers the audio
    after the last final one and replaces the previous interim. Once
    closed, late updates (e.g. a recognizer that delivers after stop) are
    dropped.
    """

    def __init__(self):
        self.final_parts: List[str] = []
        self.interim: str = ""
        self.closed = False
        self.lock = threading.Lock()

    def push(self, update: TranscriptUpdate) -> bool:
        with self.lock:
            if self.closed:
                logger.debug("Dropping transcript update after close: %r", update.text)
                return False
            text = update.text.strip()
            if update.is_final:
                # an empty final result leaves the interim text standing
                if text:
                    self.final_parts.append(text)
                    self.interim = ""
            else:
                self.interim = text
            return True

    def close(self):
        with self.lock:
            self.closed = True

    def snapshot(self) -> str:
        """Committed text followed by the pending interim text."""
        with self.lock:
            return " ".join(self.final_parts + [self.interim]).strip()
