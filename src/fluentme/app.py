import argparse
import dataclasses
import logging
import sys
from typing import Optional

from fluentme.config import Config, cfg
from fluentme.errors import DeviceUnavailable, InvalidAssessment
from fluentme.logging_config import setup_logging
from fluentme.models import SkillType
from fluentme.profile import ProfileStore, SessionAggregator
from fluentme.questions import get_questions, parse_skill
from fluentme.report import format_overview, format_result
from fluentme.session import PracticeSession
from fluentme.tts import Speaker

logger = logging.getLogger(__name__)

HELP = "[Enter] record  [p] pronounce  [n] next  [q] quit"


def build_recognizer(enabled: bool, config: Config = cfg):
    if not enabled:
        return None
    try:
        from fluentme.asr.worker import WhisperRecognizer
    except ImportError as e:
        logger.warning("faster-whisper is not installed (%s); transcription disabled", e)
        return None
    return WhisperRecognizer(config)


def build_audio_source(config: Config = cfg):
    try:
        from fluentme.audio.capture import AudioCapture
    except ImportError as e:
        raise DeviceUnavailable(f"Audio capture backend not installed: {e}") from e
    return AudioCapture(config)


def record_take(session: PracticeSession) -> bool:
    """Runs one take. Returns False if the user cancelled."""
    session.start()
    try:
        answer = input("Recording... [Enter] stop  [c] cancel > ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        session.cancel()
        raise
    if answer == "c":
        session.cancel()
        print("Cancelled.")
        return False
    print("Analyzing your speech...")
    result = session.stop()
    print(format_result(result))
    return True


def run_practice(skill_key: str, store: ProfileStore, use_asr: bool, config: Config = cfg) -> int:
    try:
        questions = get_questions(skill_key)
    except InvalidAssessment as e:
        print("Invalid Assessment")
        print(f"{e}. Please choose one of: {', '.join(s.value for s in SkillType)}")
        return 2

    skill = parse_skill(skill_key)
    speaker = Speaker(config)
    aggregator = SessionAggregator(store)
    audio_source = build_audio_source(config)
    recognizer = build_recognizer(use_asr, config)
    if recognizer is None:
        print("Transcription unavailable; only timing metrics will be scored.")

    print(f"{skill.value.capitalize()} Practice")
    index = 0
    while index < len(questions):
        prompt = questions[index]
        print(f"\n{prompt.instruction}\n  {prompt.text}")
        answer = input(f"{HELP} > ").strip().lower()
        if answer == "q":
            break
        if answer == "p":
            speaker.speak(prompt.text)
            continue
        if answer == "n":
            index += 1
            continue

        session = PracticeSession(skill, prompt, audio_source, recognizer, aggregator, config)
        if record_take(session):
            index += 1

    print()
    print(format_overview(store.load()))
    return 0


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="fluentme", description="Speech fluency practice")
    parser.add_argument("--skill", help="Skill to practice: " + ", ".join(s.value for s in SkillType))
    parser.add_argument("--show-profile", action="store_true", help="Print stored scores and exit")
    parser.add_argument("--profile", default=cfg.profile_path, help="Profile JSON path")
    parser.add_argument("--no-asr", action="store_true", help="Disable speech recognition")
    parser.add_argument("--save-recordings", metavar="DIR", help="Write each take as a WAV file to DIR")
    parser.add_argument("--log-level", default=cfg.log_level)
    args = parser.parse_args(argv)

    setup_logging(args.log_level, cfg.log_file)
    config = cfg
    if args.save_recordings:
        config = dataclasses.replace(cfg, recordings_dir=args.save_recordings)

    store = ProfileStore(args.profile)
    if args.show_profile:
        print(format_overview(store.load()))
        return 0
    if not args.skill:
        parser.error("--skill is required unless --show-profile is given")

    use_asr = config.asr_enabled and not args.no_asr
    try:
        return run_practice(args.skill, store, use_asr, config)
    except DeviceUnavailable as e:
        print(f"Microphone unavailable: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nStopped.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
