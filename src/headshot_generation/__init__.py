"""Package for headshot generation components."""

from .config import DEFAULT_MODEL
from .encoder import decode_image, encode_image
from .gemini_client import GenerationResult, build_prompt, generate_headshot

__all__ = [
    "generate_headshot",
    "build_prompt",
    "encode_image",
    "decode_image",
    "GenerationResult",
    "DEFAULT_MODEL",
]
