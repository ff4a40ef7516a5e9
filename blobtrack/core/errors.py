"""Exception classes raised by the collaborators around the tracker.

The tracker and matcher themselves never raise on well-formed input.
"""

from typing import Optional


class BlobTrackError(Exception):
    """Base exception for all blobtrack errors."""


class ConfigError(BlobTrackError):
    """Raised when a configuration value cannot be resolved."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        self.key = key
        super().__init__(message)


class EmitterError(BlobTrackError):
    """Raised when a track message cannot be delivered downstream."""

    def __init__(self, message: str, destination: Optional[str] = None) -> None:
        self.destination = destination
        super().__init__(message)
