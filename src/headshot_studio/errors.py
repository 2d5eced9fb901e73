"""Session errors, plus the generation errors re-exported for front ends."""

from __future__ import annotations

from headshot_generation.errors import (
    ConfigurationError,
    EncodingError,
    ExportError,
    HeadshotError,
    RemoteError,
    StyleNotFoundError,
    ValidationError,
)


class SessionError(RuntimeError):
    """Misuse of the session API; raised to the caller, never stored."""


class InvalidTransitionError(SessionError):
    pass


class GenerationInProgressError(SessionError):
    pass


class NoResultError(SessionError):
    pass


__all__ = [
    "HeadshotError",
    "ValidationError",
    "StyleNotFoundError",
    "EncodingError",
    "RemoteError",
    "ConfigurationError",
    "ExportError",
    "SessionError",
    "InvalidTransitionError",
    "GenerationInProgressError",
    "NoResultError",
]
