class FluentMeError(Exception):
    """Base class for all errors raised by fluentme."""


class InvalidAssessment(FluentMeError):
    """Unknown skill type, or a skill type with no prompts."""


class DeviceUnavailable(FluentMeError):
    """Audio capture could not start (no device, permission denied...)."""


class RecognitionUnavailable(FluentMeError):
    """No speech recognition engine, or the engine failed."""


class CorruptPersistedState(FluentMeError):
    """A stored profile record is not well-formed."""
