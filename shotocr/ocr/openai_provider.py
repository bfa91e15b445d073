"""OpenAI-style provider implementation.

Covers OpenAI, DeepSeek and any OpenAI-compatible gateway (the custom
provider) through the chat-completions JSON shape.
"""

import logging
from typing import Any, Dict

from shotocr.ocr.config import WireProtocol
from shotocr.ocr.provider import BaseOCRProvider, register_provider
from shotocr.ocr.utils import join_text_blocks

logger = logging.getLogger(__name__)


@register_provider(WireProtocol.OPENAI)
class OpenAIProvider(BaseOCRProvider):
    """Chat-completions provider with a bearer token."""

    def build_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def build_payload(
        self,
        image_base64: str,
        prompt: str,
        max_tokens: int
    ) -> Dict[str, Any]:
        return {
            "model": self.config.model,
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
            ],
            "max_tokens": max_tokens,
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        """Read choices[0].message.content.

        The content is usually a string. Some gateways return a list of
        typed blocks instead (e.g. "output_text"); each block contributes
        its "text" or, failing that, its "content" string.
        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self.decoding_error("missing choices")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise self.decoding_error("missing choices[0].message")

        content = message.get("content")
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, list):
            text = join_text_blocks(content, keys=("text", "content"))
            if text:
                return text
            logger.warning("Content blocks carried no text")
        raise self.decoding_error("no text in choices[0].message.content")

    def check_test_payload(self, data: Dict[str, Any]) -> None:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self.decoding_error("missing choices")
