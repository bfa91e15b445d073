"""HTTP transport for OCR requests.

The dispatcher never talks to the network itself; it hands an OCRRequest
to a transport and gets an OCRResponse back. RequestsTransport is the
default. Tests and embedding applications may pass any object with the
same send() method.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlsplit

import requests

from shotocr.ocr.errors import (
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60
TEST_TIMEOUT = 10

_TOKEN_PATTERN = re.compile(r"(access_token=)[^&\s)'\"]*")


def redact_url(message: str, url: str) -> str:
    """Strip the query string (and any access token) of url from message."""
    message = _TOKEN_PATTERN.sub(r"\1***", message)
    query = urlsplit(url).query
    if query:
        message = message.replace(query, "***")
    return message


@dataclass(frozen=True)
class OCRRequest:
    """A fully built provider request."""

    method: str
    url: str
    headers: Dict[str, str]
    body: bytes


@dataclass(frozen=True)
class OCRResponse:
    """Status, headers and raw body of a provider response."""

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)


class BaseTransport(ABC):
    """Base class for transports"""

    @abstractmethod
    def send(
        self,
        request: OCRRequest,
        timeout: float = DEFAULT_TIMEOUT
    ) -> OCRResponse:
        """
        Send one request and return the response.

        Args:
            request: Request to send
            timeout: Timeout in seconds

        Returns:
            OCRResponse for any HTTP status, including errors

        Raises:
            NetworkError: On timeouts and connection failures
            InvalidURLError: If the URL is rejected
            InvalidResponseError: If no usable HTTP response was received
        """
        pass


class RequestsTransport(BaseTransport):
    """Transport backed by the requests library."""

    def send(
        self,
        request: OCRRequest,
        timeout: float = DEFAULT_TIMEOUT
    ) -> OCRResponse:
        logger.debug(
            f"Sending {request.method} request "
            f"({len(request.body)} bytes, timeout {timeout}s)"
        )
        try:
            response = requests.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=timeout,
            )
        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ) as e:
            logger.error(
                f"Request URL rejected: {redact_url(str(e), request.url)}"
            )
            raise InvalidURLError(request.url.split("?", 1)[0])
        except requests.exceptions.Timeout as e:
            reason = redact_url(str(e), request.url)
            logger.error(f"Request timed out after {timeout}s: {reason}")
            raise NetworkError(f"Network error: request timed out ({reason})")
        except requests.exceptions.ConnectionError as e:
            reason = redact_url(str(e), request.url)
            logger.error(f"Connection failed: {reason}")
            raise NetworkError(f"Network error: {reason}")
        except requests.exceptions.RequestException as e:
            reason = redact_url(str(e), request.url)
            logger.error(f"Invalid response from server: {reason}")
            raise InvalidResponseError(
                f"Server returned an invalid response: {reason}"
            )

        logger.debug(
            f"Received HTTP {response.status_code} "
            f"({len(response.content)} bytes)"
        )
        return OCRResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )
