# tests/conftest.py
import base64
import io
from types import SimpleNamespace

import pytest
from PIL import Image


def _image_bytes(fmt: str, color=(120, 130, 140), size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return _image_bytes("JPEG", color=(200, 10, 10))


@pytest.fixture
def png_path(tmp_path, png_bytes):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def jpeg_b64(jpeg_bytes):
    return base64.b64encode(jpeg_bytes).decode("ascii")


class FakeModels:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return self.response


class FakeClient:
    """Stands in for ``genai.Client``; only the async models surface is used."""

    def __init__(self, response=None, exc=None):
        self.models_api = FakeModels(response=response, exc=exc)
        self.aio = SimpleNamespace(models=self.models_api)

    @property
    def calls(self):
        return self.models_api.calls


def make_response(parts=(), block_reason=None, finish_reason="STOP"):
    candidates = []
    if parts:
        candidates.append(
            SimpleNamespace(content=SimpleNamespace(parts=list(parts)), finish_reason=finish_reason)
        )
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    return SimpleNamespace(candidates=candidates, prompt_feedback=feedback, response_id="resp-1")


def image_part(data, mime_type="image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


@pytest.fixture
def fake_client():
    """Factory: ``fake_client(response=..., exc=...)``."""

    return FakeClient


@pytest.fixture
def responses():
    return SimpleNamespace(make=make_response, image=image_part, text=text_part)
