"""Session state machine driving upload -> style -> generate -> download.

A :class:`HeadshotSession` owns every piece of mutable state for one user.
Front ends call its transition methods and render :attr:`HeadshotSession.state`;
nothing else writes to that state.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from headshot_generation.encoder import encode_image
from headshot_generation.gemini_client import (
    GenerationResult,
    build_prompt,
    generate_headshot,
)
from style_catalog import DEFAULT_CATALOG, StyleCatalog, StylePreset

from .errors import (
    EncodingError,
    GenerationInProgressError,
    HeadshotError,
    InvalidTransitionError,
    NoResultError,
    ValidationError,
)
from .export import DEFAULT_FILENAME, export_headshot

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please upload an image and select a style first."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

Generator = Callable[[str, str, str], Awaitable[GenerationResult]]
Encoder = Callable[[Path], Awaitable[str]]


class Status(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    DONE = "done"


class Phase(str, Enum):
    EMPTY = "empty"
    STAGED = "staged"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ErrorState:
    kind: str
    message: str


class PreviewHandle:
    """Session-owned temporary copy of an upload, used for display.

    Released when the upload is replaced, on reset, or when the session closes.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.released = False

    @classmethod
    def create(cls, source: Path, mime_type: str) -> "PreviewHandle":
        suffix = mimetypes.guess_extension(mime_type) or source.suffix
        fd, name = tempfile.mkstemp(prefix="headshot-preview-", suffix=suffix or "")
        try:
            with os.fdopen(fd, "wb") as dst, open(source, "rb") as src:
                shutil.copyfileobj(src, dst)
        except OSError:
            Path(name).unlink(missing_ok=True)
            raise
        return cls(Path(name))

    def release(self) -> None:
        if self.released:
            return
        self.path.unlink(missing_ok=True)
        self.released = True


@dataclass
class UploadedImage:
    path: Path
    mime_type: str
    preview: Optional[PreviewHandle] = None

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass
class SessionState:
    image: Optional[UploadedImage] = None
    style_id: Optional[str] = None
    prompt_text: str = ""
    status: Status = Status.IDLE
    result: Optional[GenerationResult] = None
    error: Optional[ErrorState] = None

    @property
    def phase(self) -> Phase:
        if self.status is Status.GENERATING:
            return Phase.GENERATING
        if self.result is not None:
            return Phase.READY
        if self.image is None:
            return Phase.EMPTY
        if self.error is not None:
            return Phase.FAILED
        return Phase.STAGED


@dataclass
class HeadshotSession:
    """One user's headshot workflow.

    ``generator`` and ``encoder`` default to the Gemini client and the file
    encoder; tests and alternative front ends can swap them.
    """

    catalog: StyleCatalog = DEFAULT_CATALOG
    generator: Generator = generate_headshot
    encoder: Encoder = encode_image
    create_previews: bool = True
    state: SessionState = field(default_factory=SessionState)

    def __enter__(self) -> "HeadshotSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def selected_style(self) -> StylePreset | None:
        return self.catalog.get(self.state.style_id)

    def _require_phase(self, action: str, *allowed: Phase) -> None:
        phase = self.phase
        if phase not in allowed:
            raise InvalidTransitionError(f"Cannot {action} while the session is {phase.value}.")

    def _release_preview(self) -> None:
        image = self.state.image
        if image is not None and image.preview is not None:
            image.preview.release()

    def upload_image(self, path: Path | str, mime_type: str | None = None) -> UploadedImage:
        """Stage a new selfie, replacing any previous one and its result."""

        if self.state.status is Status.GENERATING:
            raise GenerationInProgressError("Cannot upload a new image while a headshot is generating.")

        source = Path(path)
        mime = mime_type or mimetypes.guess_type(source.name)[0] or "application/octet-stream"
        preview = None
        if self.create_previews:
            try:
                preview = PreviewHandle.create(source, mime)
            except OSError as exc:
                raise EncodingError(f"Could not read the uploaded image: {exc}") from exc

        self._release_preview()
        default = self.catalog.default()
        image = UploadedImage(path=source, mime_type=mime, preview=preview)
        self.state.image = image
        self.state.style_id = default.id if default else None
        self.state.result = None
        self.state.error = None
        self.state.status = Status.IDLE
        logger.info("Staged %s (%s), default style %s", source.name, mime, self.state.style_id)
        return image

    def select_style(self, style_id: str) -> StylePreset:
        self._require_phase("select a style", Phase.STAGED, Phase.READY, Phase.FAILED)
        preset = self.catalog.require(style_id)
        self.state.style_id = preset.id
        return preset

    def edit_prompt(self, text: str) -> None:
        self._require_phase("edit the prompt", Phase.STAGED, Phase.READY, Phase.FAILED)
        self.state.prompt_text = text or ""

    async def generate(self) -> GenerationResult | None:
        """Run one generation and land in ``ready`` or ``failed``.

        Returns the result on success and ``None`` otherwise; the reason is in
        ``state.error``. Only session misuse (a second call while one is in
        flight) raises.
        """

        state = self.state
        if state.status is Status.GENERATING:
            raise GenerationInProgressError("A headshot is already being generated.")

        if state.image is None or state.style_id is None:
            state.result = None
            state.error = ErrorState(ValidationError.kind, MISSING_INPUT_MESSAGE)
            return None

        # Claim the single-flight slot before the first suspend point.
        state.status = Status.GENERATING
        state.result = None
        state.error = None
        image = state.image

        try:
            preset = self.catalog.require(state.style_id)
            payload = await self.encoder(image.path)
            prompt = build_prompt(preset.prompt, state.prompt_text)
            result = await self.generator(payload, image.mime_type, prompt)
        except HeadshotError as exc:
            logger.warning("Headshot generation failed (%s): %s", exc.kind, exc.message)
            state.error = ErrorState(exc.kind, exc.message)
        except Exception:
            logger.exception("Unexpected failure while generating a headshot")
            state.error = ErrorState("unknown", UNKNOWN_ERROR_MESSAGE)
        else:
            state.result = result
            return result
        finally:
            state.status = Status.DONE
        return None

    def reset(self) -> None:
        if self.state.status is Status.GENERATING:
            raise GenerationInProgressError("Cannot reset while a headshot is generating.")
        self._release_preview()
        self.state = SessionState()

    def download(
        self,
        output_dir: Path | str = ".",
        filename: str = DEFAULT_FILENAME,
    ) -> Path:
        """Export the current result; has no effect on session state."""

        if self.phase is not Phase.READY or self.state.result is None:
            raise NoResultError("There is no generated headshot to download.")
        return export_headshot(self.state.result, output_dir, filename)

    def close(self) -> None:
        self._release_preview()


__all__ = [
    "ErrorState",
    "HeadshotSession",
    "Phase",
    "PreviewHandle",
    "SessionState",
    "Status",
    "UploadedImage",
    "MISSING_INPUT_MESSAGE",
    "UNKNOWN_ERROR_MESSAGE",
]
