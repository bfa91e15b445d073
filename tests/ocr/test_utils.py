"""Unit tests for OCR utilities."""

import base64
import io
import json

import pytest
from PIL import Image

from shotocr.ocr.errors import DecodingError, InvalidURLError
from shotocr.ocr.utils import (
    PLACEHOLDER_IMAGE_BASE64,
    check_endpoint,
    dump_json,
    encode_image,
    extract_error_message,
    join_text_blocks,
    load_json_object,
    load_png_bytes,
)


def _image_bytes(fmt):
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), "white").save(buffer, format=fmt)
    return buffer.getvalue()


class TestImages:
    """Tests for image helpers."""

    def test_encode_image(self):
        assert encode_image(b"png") == base64.b64encode(b"png").decode()

    def test_png_passes_through(self):
        data = _image_bytes("PNG")
        assert load_png_bytes(data) == data

    def test_jpeg_is_converted(self, tmp_path):
        path = tmp_path / "shot.jpg"
        path.write_bytes(_image_bytes("JPEG"))

        png = load_png_bytes(path)

        with Image.open(io.BytesIO(png)) as img:
            assert img.format == "PNG"
            assert img.size == (4, 3)

    def test_unreadable_image(self):
        with pytest.raises(ValueError, match="Unreadable image"):
            load_png_bytes(b"not an image")

    def test_placeholder_is_png(self):
        data = base64.b64decode(PLACEHOLDER_IMAGE_BASE64)
        assert data.startswith(b"\x89PNG\r\n\x1a\n")


class TestEndpoint:
    """Tests for endpoint checking."""

    def test_valid_endpoint(self):
        url = "https://api.openai.com/v1/chat/completions"
        assert check_endpoint(url) == url

    @pytest.mark.parametrize(
        "endpoint",
        ["", "not a url", "ftp://example.com/x", "https://", "http://[::1"]
    )
    def test_invalid_endpoint(self, endpoint):
        with pytest.raises(InvalidURLError):
            check_endpoint(endpoint)


class TestJson:
    """Tests for JSON helpers."""

    def test_dump_json_is_deterministic(self):
        payload = {"model": "m", "messages": [{"text": "文字"}]}
        assert dump_json(payload) == dump_json(payload)
        assert json.loads(dump_json(payload)) == payload

    def test_load_json_object_rejects_non_json(self):
        with pytest.raises(DecodingError):
            load_json_object(b"<html>oops</html>")

    def test_load_json_object_rejects_non_object(self):
        with pytest.raises(DecodingError):
            load_json_object(b"[1, 2]")

    def test_load_json_object_rejects_empty_body(self):
        with pytest.raises(DecodingError):
            load_json_object(b"")


class TestExtractErrorMessage:
    """Tests for best-effort error message extraction."""

    def test_nested_error_message(self):
        body = json.dumps({"error": {"message": "bad model"}})
        assert extract_error_message(400, body) == "bad model"

    def test_nested_error_with_details(self):
        body = json.dumps({
            "error": {
                "message": "Provider returned error",
                "code": 502,
                "type": "upstream_error",
                "metadata": {
                    "provider_name": "SomeVendor",
                    "raw": "overloaded",
                },
            }
        })

        message = extract_error_message(502, body)

        assert message == (
            "Provider returned error\n"
            "Code: 502\n"
            "Type: upstream_error\n"
            "Provider: SomeVendor\n"
            "Raw: overloaded"
        )

    def test_top_level_error_string(self):
        body = json.dumps({"error": "invalid request", "message": "ignored"})
        assert extract_error_message(400, body) == "invalid request"

    def test_top_level_message_string(self):
        body = json.dumps({"message": "quota exceeded"})
        assert extract_error_message(403, body) == "quota exceeded"

    def test_error_object_without_message_falls_through(self):
        body = json.dumps({"error": {"code": 1}, "message": "fallback"})
        assert extract_error_message(400, body) == "fallback"

    def test_unknown_json_is_pretty_printed(self):
        body = json.dumps({"detail": "nope"})

        message = extract_error_message(500, body)

        assert message.startswith("HTTP 500\n")
        assert '"detail": "nope"' in message

    def test_plain_text_body(self):
        assert extract_error_message(502, b"Bad Gateway") == (
            "HTTP 502\nBad Gateway"
        )

    def test_empty_body(self):
        assert extract_error_message(503, b"") == "HTTP 503"


class TestJoinTextBlocks:
    """Tests for content block concatenation."""

    def test_joins_text_fields(self):
        blocks = [{"text": "x"}, {"type": "image"}, {"text": "y"}]
        assert join_text_blocks(blocks) == "x\ny"

    def test_fallback_keys(self):
        blocks = [{"content": "a"}, {"text": "b", "content": "ignored"}]
        assert join_text_blocks(blocks, keys=("text", "content")) == "a\nb"

    def test_ignores_non_dict_blocks(self):
        assert join_text_blocks(["raw", None, {"text": "t"}]) == "t"
