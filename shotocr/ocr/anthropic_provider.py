"""Anthropic Messages API provider implementation."""

import logging
from typing import Any, Dict

from shotocr.ocr.config import WireProtocol
from shotocr.ocr.provider import BaseOCRProvider, register_provider
from shotocr.ocr.utils import join_text_blocks

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@register_provider(WireProtocol.ANTHROPIC)
class AnthropicProvider(BaseOCRProvider):
    """Anthropic provider, authenticated with the x-api-key header."""

    def build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_payload(
        self,
        image_base64: str,
        prompt: str,
        max_tokens: int
    ) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "max_tokens": max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": "image/png",
                                "data": image_base64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        content = data.get("content")
        if not isinstance(content, list):
            raise self.decoding_error("missing content")
        text = join_text_blocks(content)
        if not text:
            raise self.decoding_error("no text blocks in content")
        return text

    def check_test_payload(self, data: Dict[str, Any]) -> None:
        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise self.decoding_error("missing content")
