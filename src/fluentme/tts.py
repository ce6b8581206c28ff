import logging
import shutil
import subprocess
from typing import List, Optional

from fluentme.config import Config, cfg

logger = logging.getLogger(__name__)


class Speaker:
    """Reads prompts aloud through eSpeak NG (or classic eSpeak). Fire-and-forget."""

    fallback_command = "espeak"

    def __init__(self, config: Config = cfg):
        self.config = config
        self.command = self._resolve_command()
        self.process: Optional[subprocess.Popen] = None

    def _resolve_command(self) -> Optional[str]:
        for candidate in (self.config.tts_command, self.fallback_command):
            if candidate and shutil.which(candidate):
                return candidate
        logger.warning("No TTS engine found (tried %s, %s); prompts will not be spoken",
                       self.config.tts_command, self.fallback_command)
        return None

    @property
    def available(self) -> bool:
        return self.command is not None

    def build_command(self, text: str) -> List[str]:
        return [
            self.command,
            "-v", self.config.tts_voice,
            "-s", str(self.config.tts_words_per_minute),
            text,
        ]

    def speak(self, text: str):
        if not self.available or not text.strip():
            return
        # interrupt a prompt that is still playing
        if self.process and self.process.poll() is None:
            self.process.terminate()
        try:
            self.process = subprocess.Popen(
                self.build_command(text),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning("TTS playback failed: %s", e)
            self.process = None
