"""Baidu ERNIE provider implementation.

Baidu takes the access token as a query parameter and reports some
failures inside HTTP 200 responses through error_code/error_msg.
"""

import logging
from typing import Any, Dict
from urllib.parse import urlencode, urlsplit, urlunsplit

from shotocr.ocr.config import WireProtocol
from shotocr.ocr.errors import OCRAPIError
from shotocr.ocr.provider import BaseOCRProvider, register_provider

logger = logging.getLogger(__name__)


@register_provider(WireProtocol.BAIDU)
class BaiduProvider(BaseOCRProvider):
    """ERNIE chat-completions provider."""

    def build_url(self) -> str:
        parts = urlsplit(self.config.endpoint)
        token = urlencode({"access_token": self.config.api_key})
        query = f"{parts.query}&{token}" if parts.query else token
        return urlunsplit(parts._replace(query=query))

    def build_headers(self) -> Dict[str, str]:
        return {}

    def build_payload(
        self,
        image_base64: str,
        prompt: str,
        max_tokens: int
    ) -> Dict[str, Any]:
        # ERNIE takes no model or max_tokens in the body; the model is
        # part of the endpoint path
        return {
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:image/png;base64,{image_base64}"
                            },
                        },
                    ],
                }
            ]
        }

    def _check_error_code(self, data: Dict[str, Any]) -> None:
        error_code = data.get("error_code")
        if error_code not in (None, 0, "0", ""):
            message = data.get("error_msg") or f"error_code {error_code}"
            logger.error(f"Baidu API error ({error_code}): {message}")
            raise OCRAPIError(str(message))

    def extract_text(self, data: Dict[str, Any]) -> str:
        self._check_error_code(data)
        result = data.get("result")
        if not isinstance(result, str):
            raise self.decoding_error("missing result")
        return result.strip()

    def check_test_payload(self, data: Dict[str, Any]) -> None:
        self._check_error_code(data)
