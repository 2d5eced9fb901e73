import asyncio
import base64

import httpx
import pytest
from google.genai import errors as genai_errors

from headshot_generation import gemini_client
from headshot_generation.gemini_client import (
    GenerationResult,
    build_prompt,
    generate_headshot,
    validate_request,
)
from headshot_studio.errors import ConfigurationError, RemoteError, ValidationError

IMAGE_B64 = base64.b64encode(b"selfie-bytes").decode("ascii")


def test_build_prompt_joins_and_trims():
    assert build_prompt("Grey backdrop.", "add glasses") == "Grey backdrop. add glasses"
    assert build_prompt("Grey backdrop.", "") == "Grey backdrop."
    assert build_prompt("  Grey backdrop. ", "  ") == "Grey backdrop."


def test_validate_request_normalizes():
    request = validate_request("data:image/jpg;base64," + IMAGE_B64, "image/JPG", "  go  ")
    assert request.image_base64 == IMAGE_B64
    assert request.mime_type == "image/jpeg"
    assert request.prompt == "go"


@pytest.mark.parametrize(
    "image, mime, prompt",
    [
        ("", "image/png", "go"),
        ("###", "image/png", "go"),
        (IMAGE_B64, "text/plain", "go"),
        (IMAGE_B64, "image/png", "   "),
    ],
)
def test_validate_request_rejects(image, mime, prompt):
    with pytest.raises(ValidationError):
        validate_request(image, mime, prompt)


def test_generate_sends_one_image_and_one_instruction(fake_client, responses, jpeg_bytes):
    client = fake_client(response=responses.make([responses.image(jpeg_bytes, "image/jpeg")]))

    result = asyncio.run(
        generate_headshot(IMAGE_B64, "image/png", "Grey backdrop.", model="test-model", client=client)
    )

    assert isinstance(result, GenerationResult)
    assert base64.b64decode(result.image_base64) == jpeg_bytes
    assert result.mime_type == "image/jpeg"

    (call,) = client.calls
    assert call["model"] == "test-model"
    image_part, instruction = call["contents"]
    assert image_part.inline_data.mime_type == "image/png"
    assert image_part.inline_data.data == b"selfie-bytes"
    assert instruction == "Grey backdrop."


def test_generate_returns_first_image_after_text(fake_client, responses):
    parts = [
        responses.text("Here is your headshot"),
        responses.image(b"first", "image/png"),
        responses.image(b"second", "image/png"),
    ]
    client = fake_client(response=responses.make(parts))

    result = asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert base64.b64decode(result.image_base64) == b"first"
    assert result.mime_type == "image/png"


def test_generate_accepts_base64_text_inline_data(fake_client, responses):
    encoded = base64.b64encode(b"img").decode("ascii")
    client = fake_client(response=responses.make([responses.image(encoded, None)]))

    result = asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert result.image_base64 == encoded
    assert result.mime_type == "image/jpeg"


def test_no_image_part_is_a_remote_error(fake_client, responses):
    client = fake_client(response=responses.make([responses.text("I can't help with that photo.")]))

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "did not return an image" in info.value.message
    assert "I can't help with that photo." in info.value.message


def test_blocked_prompt_is_a_remote_error(fake_client, responses):
    client = fake_client(response=responses.make(block_reason="SAFETY"))

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "blocked" in info.value.message
    assert "SAFETY" in info.value.message


def test_empty_response_is_a_remote_error(fake_client, responses):
    client = fake_client(response=responses.make())

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "did not return an image" in info.value.message


def test_service_error_keeps_service_message(fake_client):
    exc = genai_errors.ClientError(
        400,
        {"error": {"code": 400, "message": "Image too large", "status": "INVALID_ARGUMENT"}},
    )
    client = fake_client(exc=exc)

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "Image too large" in info.value.message
    assert info.value.status_code == 400
    assert info.value.__cause__ is exc


def test_network_error_is_wrapped(fake_client):
    client = fake_client(exc=httpx.ConnectError("connection refused"))

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "Network error" in info.value.message
    assert "connection refused" in info.value.message


def test_timeout_is_wrapped(fake_client):
    client = fake_client(exc=asyncio.TimeoutError())

    with pytest.raises(RemoteError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go", client=client))

    assert "TimeoutError" in info.value.message


def test_invalid_input_never_reaches_the_service(fake_client, responses):
    client = fake_client(response=responses.make([responses.image(b"x")]))

    with pytest.raises(ValidationError):
        asyncio.run(generate_headshot(IMAGE_B64, "application/pdf", "go", client=client))

    assert client.calls == []


def test_missing_api_key(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(gemini_client, "load_env_key", lambda: None)

    with pytest.raises(ConfigurationError) as info:
        asyncio.run(generate_headshot(IMAGE_B64, "image/png", "go"))

    assert "GEMINI_API_KEY" in info.value.message
    assert isinstance(info.value, RemoteError)
