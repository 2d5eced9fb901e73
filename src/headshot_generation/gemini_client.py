"""Helpers for calling Gemini's image model to restyle a selfie as a headshot."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Tuple

import httpx

try:
    from google import genai
    from google.genai import errors as genai_errors
    from google.genai import types
except ImportError as exc:  # pragma: no cover - handled at runtime
    raise ImportError(
        "google-genai is required for headshot generation. Install with `pip install google-genai`."
    ) from exc

from .config import DEFAULT_MODEL, load_env_key, resolve_api_key
from .encoder import strip_data_uri
from .errors import ConfigurationError, RemoteError, ValidationError

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = frozenset(
    {"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"}
)
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}
RESULT_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class GenerationRequest:
    image_base64: str
    mime_type: str
    prompt: str


@dataclass(frozen=True)
class GenerationResult:
    image_base64: str
    mime_type: str = RESULT_MIME_TYPE


def build_prompt(style_prompt: str, addendum: str = "") -> str:
    """Join a style fragment and the user's free-text edits into one instruction."""

    return f"{style_prompt} {addendum or ''}".strip()


def normalize_mime_type(mime_type: str) -> str:
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    return _MIME_ALIASES.get(mime, mime)


def validate_request(image_base64: str, mime_type: str, prompt: str) -> GenerationRequest:
    """Check inputs before spending a network round trip on them."""

    payload = strip_data_uri(image_base64 or "")
    if not payload:
        raise ValidationError("Image payload is empty.")
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"Image payload is not valid base64: {exc}") from exc

    mime = normalize_mime_type(mime_type)
    if mime not in ACCEPTED_MIME_TYPES:
        accepted = ", ".join(sorted(ACCEPTED_MIME_TYPES))
        raise ValidationError(f"Unsupported image type {mime_type!r}. Use one of: {accepted}.")

    text = (prompt or "").strip()
    if not text:
        raise ValidationError("Prompt must not be empty.")

    return GenerationRequest(image_base64=payload, mime_type=mime, prompt=text)


def _describe_empty_response(response: Any) -> str:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback else None
    candidates = getattr(response, "candidates", None) or []
    finish = [str(getattr(c, "finish_reason", None)) for c in candidates]
    text = _extract_text(response)

    message = "The model did not return an image."
    if reason:
        message += f" The request was blocked: {reason}."
    elif text:
        message += f" Model response: {text}"
    else:
        message += " It may have declined the request; try a different photo or instruction."
    logger.debug(
        "Empty image response block_reason=%s candidates=%d finish_reasons=%s resp_id=%s",
        reason,
        len(candidates),
        finish,
        getattr(response, "response_id", None),
    )
    return message


def _iter_parts(response: Any):
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            yield part


def _extract_text(response: Any) -> str:
    texts = [getattr(part, "text", None) for part in _iter_parts(response)]
    return " ".join(t.strip() for t in texts if isinstance(t, str) and t.strip())


def _extract_image(response: Any) -> Tuple[bytes, str] | None:
    """Return the first inline image part as (bytes, mime type)."""

    for part in _iter_parts(response):
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline else None
        if not data:
            continue
        if isinstance(data, str):
            # Some transports hand back the base64 text rather than bytes.
            data = base64.b64decode(data)
        mime = getattr(inline, "mime_type", None) or RESULT_MIME_TYPE
        return data, mime
    return None


async def generate_headshot(
    image_base64: str,
    mime_type: str,
    prompt: str,
    *,
    model: str | None = None,
    api_key: str | None = None,
    client: Any | None = None,
) -> GenerationResult:
    """Generate a headshot from one selfie using Gemini's image model.

    Args:
        image_base64: Base64 text of the uploaded selfie (a data URI is accepted).
        mime_type: Declared MIME type of the selfie, e.g. ``image/png``.
        prompt: Full instruction built from a style fragment plus user edits.
        model: Model name override (defaults to ``HEADSHOT_STUDIO_MODEL``).
        api_key: Gemini API key. Falls back to ``GEMINI_API_KEY``, ``GOOGLE_API_KEY``
            or ``API_KEY``.
        client: Pre-built ``genai.Client``; one is created when omitted.

    Returns:
        The first generated image as base64 text without a data-URI prefix.

    Raises:
        ValidationError: inputs are empty, malformed or of an unsupported type.
        RemoteError: transport failure, service error, or no image in the response.
    """

    request = validate_request(image_base64, mime_type, prompt)

    if client is None:
        load_env_key()
        key = resolve_api_key(api_key)
        if not key:
            raise ConfigurationError(
                "Set GEMINI_API_KEY (or GOOGLE_API_KEY) before generating headshots."
            )
        client = genai.Client(api_key=key)

    model_name = model or DEFAULT_MODEL
    config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
    contents = [
        types.Part.from_bytes(
            data=base64.b64decode(request.image_base64), mime_type=request.mime_type
        ),
        request.prompt,
    ]

    logger.info("Requesting headshot from %s (%s, prompt %d chars)", model_name, request.mime_type, len(request.prompt))
    try:
        response = await client.aio.models.generate_content(
            model=model_name,
            contents=contents,
            config=config,
        )
    except genai_errors.APIError as exc:
        message = getattr(exc, "message", None) or str(exc)
        logger.error("Gemini API error %s: %s", getattr(exc, "code", None), message)
        raise RemoteError(
            f"Headshot service error: {message}", status_code=getattr(exc, "code", None)
        ) from exc
    except (httpx.HTTPError, asyncio.TimeoutError, OSError) as exc:
        logger.error("Network error calling Gemini: %s", exc)
        detail = str(exc) or type(exc).__name__
        raise RemoteError(f"Network error while contacting the headshot service: {detail}") from exc

    image = _extract_image(response)
    if image is None:
        raise RemoteError(_describe_empty_response(response))

    data, result_mime = image
    logger.info("Received %d bytes (%s) from %s", len(data), result_mime, model_name)
    return GenerationResult(
        image_base64=base64.b64encode(data).decode("ascii"), mime_type=result_mime
    )


__all__ = [
    "ACCEPTED_MIME_TYPES",
    "GenerationRequest",
    "GenerationResult",
    "build_prompt",
    "validate_request",
    "generate_headshot",
]
