"""Turn uploaded image files into base64 payloads for the model."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import os
import re
from pathlib import Path
from typing import BinaryIO, Union

from .errors import EncodingError

logger = logging.getLogger(__name__)

ImageSource = Union[str, "os.PathLike[str]", BinaryIO]

_DATA_URI = re.compile(r"^data:[^;,]*(;[^,]*)?,", re.IGNORECASE)


def strip_data_uri(text: str) -> str:
    """Drop a leading ``data:<mime>;base64,`` prefix if present."""

    return _DATA_URI.sub("", text.strip(), count=1)


def _read_source(source: ImageSource) -> bytes:
    if isinstance(source, (str, os.PathLike)):
        return Path(source).read_bytes()
    data = source.read()
    if not isinstance(data, (bytes, bytearray)):
        raise OSError("image source must be opened in binary mode")
    return bytes(data)


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


async def encode_image(source: ImageSource) -> str:
    """Read the full image and return its base64 text (no data-URI prefix).

    Reading happens in a worker thread so the event loop stays free while
    large uploads are pulled into memory.
    """

    try:
        data = await asyncio.to_thread(_read_source, source)
    except (OSError, ValueError) as exc:
        # ValueError covers reads from a closed file object.
        name = getattr(source, "name", source)
        logger.warning("Could not read image %s: %s", name, exc)
        raise EncodingError(f"Could not read the uploaded image: {exc}") from exc

    logger.debug("Encoded %d bytes of image data", len(data))
    return encode_bytes(data)


def decode_image(text: str) -> bytes:
    """Decode base64 text (optionally a data URI) back into raw bytes."""

    try:
        return base64.b64decode(strip_data_uri(text), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"Invalid base64 image payload: {exc}") from exc


__all__ = ["encode_image", "encode_bytes", "decode_image", "strip_data_uri"]
