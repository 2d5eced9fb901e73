"""Errors raised while preparing or running a headshot generation."""

from __future__ import annotations


class HeadshotError(RuntimeError):
    """Base class for failures that are reported to the user."""

    kind = "unknown"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(HeadshotError):
    kind = "validation"


class StyleNotFoundError(ValidationError):
    def __init__(self, style_id: str) -> None:
        super().__init__(f"Invalid style selected: {style_id!r}")
        self.style_id = style_id


class EncodingError(HeadshotError):
    kind = "encoding"


class RemoteError(HeadshotError):
    """The Gemini call failed, was refused, or returned no image."""

    kind = "remote"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(RemoteError):
    pass


class ExportError(HeadshotError):
    kind = "export"


__all__ = [
    "HeadshotError",
    "ValidationError",
    "StyleNotFoundError",
    "EncodingError",
    "RemoteError",
    "ConfigurationError",
    "ExportError",
]
