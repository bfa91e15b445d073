"""OCR utilities shared by the provider implementations.

Helpers for encoding images, checking endpoints and digging text or error
details out of provider responses.
"""

import base64
import io
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

from PIL import Image

from shotocr.ocr.errors import DecodingError, InvalidURLError

logger = logging.getLogger(__name__)

# 1x1 PNG sent by connection tests instead of a real screenshot
PLACEHOLDER_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA"
    "60e6kgAAAABJRU5ErkJggg=="
)
TEST_PROMPT = "test"
TEST_MAX_TOKENS = 16


def encode_image(image: bytes) -> str:
    """Base64-encode PNG bytes for the wire layer."""
    return base64.b64encode(image).decode("ascii")


def load_png_bytes(source: Union[str, Path, bytes]) -> bytes:
    """Read an image and return it as PNG bytes.

    PNG input is passed through untouched; any other format Pillow can
    open is converted.

    Args:
        source: Path to an image file, or raw image bytes

    Returns:
        bytes: PNG encoded image

    Raises:
        ValueError: If the data is not a readable image
    """
    if isinstance(source, (str, Path)):
        with open(source, "rb") as f:
            data = f.read()
    else:
        data = source

    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format == "PNG":
                return data
            logger.info(f"Converting {img.format} image to PNG")
            if img.mode not in ("RGB", "RGBA", "L", "LA"):
                img = img.convert("RGBA")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            return buffer.getvalue()
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Unreadable image data: {e}")


def check_endpoint(endpoint: str) -> str:
    """Make sure the endpoint is an http(s) URL with a host.

    Raises:
        InvalidURLError: If the endpoint cannot be used as a URL
    """
    try:
        parts = urlsplit(endpoint)
    except ValueError:
        raise InvalidURLError(endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURLError(endpoint)
    return endpoint


def dump_json(payload: Any) -> bytes:
    """Serialize a request payload.

    Key order follows the payload, so identical inputs give identical bytes.
    """
    return json.dumps(
        payload,
        ensure_ascii=False,
        separators=(",", ":")
    ).encode("utf-8")


def load_json(body: Union[bytes, str, None]) -> Any:
    """Parse a response body, returning None if it is not JSON."""
    if not body:
        return None
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        return json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return None


def load_json_object(body: Union[bytes, str, None]) -> dict:
    """Parse a response body that must be a JSON object.

    Raises:
        DecodingError: If the body is not a JSON object
    """
    data = load_json(body)
    if not isinstance(data, dict):
        logger.error("Response body is not a JSON object")
        raise DecodingError()
    return data


def extract_error_message(
    status_code: int,
    body: Union[bytes, str, None]
) -> str:
    """Pull a diagnostic message out of an error response.

    Gateways nest error details differently, so several places are tried
    in turn:

    1. error.message, with error.code, error.type,
       error.metadata.provider_name and error.metadata.raw appended as
       extra lines
    2. a top-level "error" string
    3. a top-level "message" string
    4. "HTTP <status>" followed by the pretty-printed body

    Args:
        status_code: HTTP status of the response
        body: Raw response body

    Returns:
        str: Message that is never empty
    """
    data = load_json(body)

    if isinstance(data, dict):
        message = find_embedded_error(data)
        if message:
            return message
        if isinstance(data.get("error"), str):
            return data["error"]
        if isinstance(data.get("message"), str):
            return data["message"]

    message = f"HTTP {status_code}"
    if data is not None:
        message += "\n" + json.dumps(data, ensure_ascii=False, indent=2)
    elif body:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if body.strip():
            message += "\n" + body.strip()
    return message


def find_embedded_error(data: dict) -> Optional[str]:
    """Return the error.message text (plus details) if the body has one."""
    error = data.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if not isinstance(message, str):
        return None

    lines = [message]
    if error.get("code") is not None:
        lines.append(f"Code: {error['code']}")
    if error.get("type") is not None:
        lines.append(f"Type: {error['type']}")
    metadata = error.get("metadata")
    if isinstance(metadata, dict):
        if metadata.get("provider_name") is not None:
            lines.append(f"Provider: {metadata['provider_name']}")
        if metadata.get("raw") is not None:
            lines.append(f"Raw: {metadata['raw']}")
    return "\n".join(lines)


def join_text_blocks(blocks: List[Any], keys=("text",)) -> str:
    """Concatenate the text of typed content blocks.

    For each block the first string value found under ``keys`` is taken;
    blocks without one are skipped. Fragments are joined with newlines.
    """
    fragments = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        for key in keys:
            value = block.get(key)
            if isinstance(value, str):
                fragments.append(value)
                break
    return "\n".join(fragments).strip()
