"""Base OCR provider implementation.

A provider knows one wire protocol: how to turn an image into a request
and how to read the answer back. It holds no connection and never sends
anything itself; OCRService does that through a transport.

To add a new protocol family:

1. Add a member to WireProtocol (and the Provider entries using it) in
   config.py.
2. Create `{name}_provider.py` in this package with a class extending
   BaseOCRProvider and decorated with @register_provider(WireProtocol.X).
3. Implement build_payload(), build_headers(), extract_text() and
   check_test_payload(). Override build_url() if the credential does not
   travel in a header.
4. Import the module in shotocr/ocr/__init__.py so it gets registered.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union

from shotocr.ocr.config import OCRConfig, WireProtocol
from shotocr.ocr.errors import (
    DecodingError,
    OCRAPIError,
    RateLimitError,
    UnauthorizedError,
)
from shotocr.ocr.transport import OCRRequest
from shotocr.ocr.utils import (
    check_endpoint,
    dump_json,
    extract_error_message,
    find_embedded_error,
    load_json_object,
)

logger = logging.getLogger(__name__)

# Provider registry
_registered_providers: Dict[WireProtocol, Type["BaseOCRProvider"]] = {}


def register_provider(protocol: WireProtocol):
    """Decorator to register a provider class for a protocol family.

    Args:
        protocol: The wire protocol the class implements.
    """
    def decorator(cls):
        _registered_providers[protocol] = cls
        cls.protocol = protocol
        return cls
    return decorator


def get_provider(config: OCRConfig) -> "BaseOCRProvider":
    """Instantiate the provider class for the config's protocol family.

    Raises:
        ValueError: If no provider is registered for the protocol.
    """
    protocol = config.provider.protocol
    provider_class = _registered_providers.get(protocol)
    if provider_class is None:
        raise ValueError(
            f"No provider registered for protocol '{protocol.value}'"
        )
    return provider_class(config)


def list_registered_protocols():
    return sorted(p.value for p in _registered_providers)


class BaseOCRProvider(ABC):
    """Base class for OCR providers"""

    protocol: Optional[WireProtocol] = None

    def __init__(self, config: OCRConfig):
        """Initialize OCR provider with configuration."""
        if not isinstance(config, OCRConfig):
            raise ValueError("Config must be an instance of OCRConfig")
        self.config = config

    def build_request(
        self,
        image_base64: str,
        prompt: Optional[str] = None,
        max_tokens: Optional[int] = None
    ) -> OCRRequest:
        """
        Build the HTTP request for one recognition call.

        Args:
            image_base64: Base64-encoded PNG image
            prompt: Instruction text, defaults to config.prompt
            max_tokens: Token budget, defaults to config.max_tokens

        Returns:
            OCRRequest ready for the transport

        Raises:
            InvalidURLError: If the endpoint is not a usable URL
        """
        check_endpoint(self.config.endpoint)
        payload = self.build_payload(
            image_base64,
            prompt if prompt is not None else self.config.prompt,
            max_tokens if max_tokens is not None else self.config.max_tokens,
        )
        headers = {"Content-Type": "application/json"}
        headers.update(self.build_headers())
        return OCRRequest(
            method="POST",
            url=self.build_url(),
            headers=headers,
            body=dump_json(payload),
        )

    def build_url(self) -> str:
        return self.config.endpoint

    @abstractmethod
    def build_headers(self) -> Dict[str, str]:
        """Return the protocol-specific headers (credentials etc.)."""
        pass

    @abstractmethod
    def build_payload(
        self,
        image_base64: str,
        prompt: str,
        max_tokens: int
    ) -> Dict[str, Any]:
        """Return the JSON request body as a dict."""
        pass

    def parse_response(
        self,
        status_code: int,
        body: Union[bytes, str, None]
    ) -> str:
        """
        Turn a provider response into recognized text.

        Args:
            status_code: HTTP status code
            body: Raw response body

        Returns:
            str: Recognized text, whitespace-trimmed

        Raises:
            UnauthorizedError: On HTTP 401
            RateLimitError: On HTTP 429
            OCRAPIError: On any other non-2xx status or an in-body error
            DecodingError: If the body has no recognizable shape
        """
        self.check_status(status_code, body)
        data = load_json_object(body)
        return self.extract_text(data)

    def parse_test_response(
        self,
        status_code: int,
        body: Union[bytes, str, None]
    ) -> None:
        """
        Check a connection-test response.

        Only the success container is looked at; no text needs to be
        extracted. Raises the same errors as parse_response().
        """
        self.check_status(status_code, body)
        data = load_json_object(body)
        # Some gateways answer 200 with an error object
        message = find_embedded_error(data)
        if message:
            logger.error(f"Error embedded in successful response: {message}")
            raise OCRAPIError(message, status_code)
        self.check_test_payload(data)

    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> str:
        """Extract text from a successful response body."""
        pass

    @abstractmethod
    def check_test_payload(self, data: Dict[str, Any]) -> None:
        """Raise if a successful test response lacks the expected shape."""
        pass

    def check_status(
        self,
        status_code: int,
        body: Union[bytes, str, None]
    ) -> None:
        """Classify a non-2xx status into the matching error."""
        if 200 <= status_code < 300:
            return
        if status_code == 401:
            logger.error(
                "Authentication failed (401). Invalid API key or endpoint."
            )
            raise UnauthorizedError()
        if status_code == 429:
            logger.warning(
                f"Rate limit exceeded (429). {self.config.provider.value} "
                f"is throttling requests."
            )
            raise RateLimitError()

        message = extract_error_message(status_code, body)
        logger.error(f"API error ({status_code}): {message}")
        raise OCRAPIError(message, status_code)

    def decoding_error(self, reason: str) -> DecodingError:
        logger.error(
            f"Unexpected {self.config.provider.value} response: {reason}"
        )
        return DecodingError(f"Failed to decode response data: {reason}")
