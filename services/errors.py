"""Exception hierarchy shared by the Talbot services."""

from __future__ import annotations


class TalbotError(Exception):
    """Base class for recoverable Talbot failures."""


class ChatBackendError(TalbotError):
    """The remote reply was unavailable, degraded or empty."""


class SpeechError(TalbotError):
    """Text-to-speech synthesis failed."""


class DocumentError(TalbotError):
    """An uploaded clinical document was rejected."""


__all__ = ["ChatBackendError", "DocumentError", "SpeechError", "TalbotError"]
