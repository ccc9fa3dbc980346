"""
Errors shared by the speech input and output services.
"""


class SpeechUnavailableError(Exception):
    """The speech provider is not configured, so the control is unsupported."""


class SpeechError(Exception):
    """The speech provider failed for this request."""
