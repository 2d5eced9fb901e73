"""Environment-driven settings for the Gemini headshot model."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence


DEFAULT_MODEL = os.environ.get("HEADSHOT_STUDIO_MODEL", "gemini-2.5-flash-image")
API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def _env_candidates() -> list[Path]:
    return [
        Path(__file__).resolve().parents[2] / ".env",  # this repo root
        Path.cwd() / ".env",
        Path.home() / ".env",
    ]


def load_env_key(candidates: Sequence[Path] | None = None) -> None:
    """Best-effort load API keys and settings from .env files.

    Checks (in order): the project root .env, cwd .env and HOME/.env. Values
    already in the environment are never overwritten.
    """

    for path in candidates if candidates is not None else _env_candidates():
        if not path.exists():
            continue
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key in os.environ:
                continue
            os.environ[key] = value.strip().strip('"').strip("'")


def resolve_api_key(api_key: str | None = None) -> str | None:
    """Return the explicit key or the first one set in the environment."""

    if api_key:
        return api_key
    for name in API_KEY_VARS:
        value = os.getenv(name)
        if value:
            return value
    return None


__all__ = ["DEFAULT_MODEL", "API_KEY_VARS", "load_env_key", "resolve_api_key"]
