"""OCR module.

This module sends a screenshot to a vision API and returns the text it
contains.

Features:
- OpenAI-style (OpenAI, DeepSeek, custom gateways), Anthropic and Baidu
  ERNIE wire protocols
- Automatic retry (3 attempts): rate limits back off 2s, 4s; other errors
  wait a flat 2s
- Best-effort error messages for the different gateway error formats
- Connection test with a placeholder image
- Cancellation between attempts

Supported Providers:
- OpenAI (OpenAIProvider)
- DeepSeek (OpenAIProvider)
- Custom OpenAI-compatible endpoint (OpenAIProvider)
- Anthropic (AnthropicProvider)
- Baidu ERNIE (BaiduProvider)
"""

from shotocr.ocr.config import (
    OCRConfig,
    Provider,
    WireProtocol,
    load_config,
    save_config,
    reset_config,
)
from shotocr.ocr.errors import (
    OCRError,
    InvalidURLError,
    InvalidResponseError,
    NetworkError,
    UnauthorizedError,
    RateLimitError,
    DecodingError,
    OCRAPIError,
    OCRCancelledError,
)
from shotocr.ocr.provider import BaseOCRProvider, get_provider
from shotocr.ocr.openai_provider import OpenAIProvider
from shotocr.ocr.anthropic_provider import AnthropicProvider
from shotocr.ocr.baidu_provider import BaiduProvider
from shotocr.ocr.transport import (
    BaseTransport,
    RequestsTransport,
    OCRRequest,
    OCRResponse,
)
from shotocr.ocr.service import OCRService

__all__ = [
    'OCRConfig',
    'Provider',
    'WireProtocol',
    'load_config',
    'save_config',
    'reset_config',
    'OCRError',
    'InvalidURLError',
    'InvalidResponseError',
    'NetworkError',
    'UnauthorizedError',
    'RateLimitError',
    'DecodingError',
    'OCRAPIError',
    'OCRCancelledError',
    'BaseOCRProvider',
    'get_provider',
    'OpenAIProvider',
    'AnthropicProvider',
    'BaiduProvider',
    'BaseTransport',
    'RequestsTransport',
    'OCRRequest',
    'OCRResponse',
    'OCRService',
]
