import base64
import io

import pytest
from PIL import Image

from headshot_generation.gemini_client import GenerationResult
from headshot_studio.errors import ExportError
from headshot_studio.export import DEFAULT_FILENAME, export_headshot


def test_jpeg_payload_is_written_untouched(tmp_path, jpeg_bytes, jpeg_b64):
    path = export_headshot(GenerationResult(jpeg_b64), tmp_path)

    assert path == tmp_path / DEFAULT_FILENAME
    assert path.read_bytes() == jpeg_bytes


def test_png_payload_is_reencoded_as_jpeg(tmp_path, png_bytes):
    result = GenerationResult(base64.b64encode(png_bytes).decode("ascii"), "image/png")

    path = export_headshot(result, tmp_path / "nested", "me.jpeg")

    assert path.name == "me.jpeg"
    with Image.open(path) as image:
        assert image.format == "JPEG"
        assert image.size == (8, 8)


def test_rgba_payload_is_flattened(tmp_path):
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), (0, 255, 0, 128)).save(buffer, format="PNG")
    result = GenerationResult(base64.b64encode(buffer.getvalue()).decode("ascii"), "image/png")

    path = export_headshot(result, tmp_path)

    with Image.open(path) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_filename_cannot_escape_output_dir(tmp_path, jpeg_b64):
    path = export_headshot(GenerationResult(jpeg_b64), tmp_path, "../../evil.jpeg")
    assert path == tmp_path / "evil.jpeg"


@pytest.mark.parametrize("payload", ["%%%", base64.b64encode(b"not an image").decode("ascii")])
def test_unreadable_payload_raises_export_error(tmp_path, payload):
    with pytest.raises(ExportError):
        export_headshot(GenerationResult(payload), tmp_path)
    assert not (tmp_path / DEFAULT_FILENAME).exists()
