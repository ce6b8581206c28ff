from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    # --- Audio Capture ---
    sample_rate: int = int(os.getenv("SAMPLE_RATE", "16000"))
    capture_blocksize: int = int(os.getenv("CAPTURE_BLOCKSIZE", "512"))  # samples per VAD frame
    capture_device: str | None = os.getenv("CAPTURE_DEVICE", None)
    capture_gain: float = float(os.getenv("CAPTURE_GAIN", "1.0"))

    # --- VAD ---
    silence_threshold: float = float(os.getenv("SILENCE_THRESHOLD", "0.01"))  # linear RMS amplitude
    min_pause_s: float = float(os.getenv("MIN_PAUSE_S", "0.25"))
    max_session_s: float = float(os.getenv("MAX_SESSION_S", "300"))  # sizes the ring buffers

    # --- Scoring ---
    ideal_wpm: float = 150.0
    wpm_tolerance: float = 150.0
    weight_wpm: float = 0.30
    weight_stutter: float = 0.35
    weight_pause: float = 0.20
    weight_speaking: float = 0.15
    min_speaking_s: float = 0.5   # floor for the pause ratio denominator
    min_duration_s: float = 0.1   # floor for the speaking ratio denominator

    # --- ASR ---
    asr_enabled: bool = os.getenv("ASR_ENABLED", "true").lower() == "true"
    asr_model: str = os.getenv("ASR_MODEL", "base.en")
    asr_device: str = os.getenv("ASR_DEVICE", "cpu")
    asr_compute_type: str = os.getenv("ASR_COMPUTE_TYPE", "int8")
    asr_language: str | None = os.getenv("ASR_LANGUAGE", "en")
    asr_update_interval_s: float = float(os.getenv("ASR_UPDATE_INTERVAL_S", "1.0"))
    asr_decode_window_s: float = 20.0
    asr_min_audio_s: float = 0.5
    asr_beam_size_streaming: int = int(os.getenv("ASR_BEAM_SIZE_STREAMING", "1"))
    asr_beam_size_final: int = int(os.getenv("ASR_BEAM_SIZE_FINAL", "5"))
    finalize_timeout_s: float = float(os.getenv("FINALIZE_TIMEOUT_S", "3.0"))  # bounded wait for the final transcript

    # --- TTS ---
    tts_command: str = os.getenv("TTS_COMMAND", "espeak-ng")
    tts_voice: str = os.getenv("TTS_VOICE", "en")
    tts_words_per_minute: int = int(os.getenv("TTS_WPM", "175"))

    # --- Storage ---
    profile_path: str = os.getenv("PROFILE_PATH", str(Path.home() / ".fluentme" / "profile.json"))
    recordings_dir: str | None = os.getenv("RECORDINGS_DIR", None)

    # --- Logging ---
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str | None = os.getenv("LOG_FILE", None)

# Global instance
cfg = Config()
