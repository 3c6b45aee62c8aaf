"""Exceptions raised outside the estimators.

Estimators never raise for weak or missing rhythm; these cover failures to
obtain samples in the first place.
"""


class TempoDetectError(Exception):
    """Base class for tempodetect errors."""


class DecodeError(TempoDetectError):
    """The audio container could not be decoded into samples."""


class EncodingError(DecodeError):
    """The audio data itself is malformed or in an unsupported format."""

    def __init__(self, message: str = "Unable to decode audio data"):
        super().__init__(message)


class EnvironmentUnavailableError(TempoDetectError):
    """The decoding capability needed for this input is not available."""
