"""Save a generated headshot to local disk."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from headshot_generation.encoder import decode_image
from headshot_generation.gemini_client import GenerationResult

from .errors import EncodingError, ExportError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "ai-headshot.jpeg"


def _to_jpeg(data: bytes) -> bytes:
    """Return JPEG bytes, re-encoding only when the payload is another format."""

    try:
        with Image.open(io.BytesIO(data)) as image:
            if image.format == "JPEG":
                return data
            logger.info("Converting %s result to JPEG for export", image.format)
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=95)
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError) as exc:
        raise ExportError(f"Generated data is not a readable image: {exc}") from exc


def export_headshot(
    result: GenerationResult,
    output_dir: Path | str = ".",
    filename: str = DEFAULT_FILENAME,
) -> Path:
    """Write the result as a JPEG file and return its path."""

    try:
        data = decode_image(result.image_base64)
    except EncodingError as exc:
        raise ExportError(exc.message) from exc

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    name = Path(filename).name or DEFAULT_FILENAME
    out_path = out_dir / name

    out_path.write_bytes(_to_jpeg(data))
    logger.info("Saved headshot to %s", out_path)
    return out_path


__all__ = ["DEFAULT_FILENAME", "export_headshot"]
