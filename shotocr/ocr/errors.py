"""Exceptions raised by the OCR dispatcher.

Every failure an OCR call can end with is one of these classes, so callers
only need to catch OCRError.
"""

from typing import Optional


class OCRError(Exception):
    """Base exception for OCR-related errors"""
    pass


class InvalidURLError(OCRError):
    """Raised when the configured endpoint is not a usable URL"""

    def __init__(self, endpoint: str = ""):
        self.endpoint = endpoint
        super().__init__(f"Invalid API endpoint: {endpoint!r}")


class InvalidResponseError(OCRError):
    """Raised when the server response is not a readable HTTP response"""

    def __init__(self, message: str = "Server returned an invalid response"):
        super().__init__(message)


class NetworkError(OCRError):
    """Raised when network-related errors occur (timeout, connection issues)"""
    pass


class UnauthorizedError(OCRError):
    """Raised on HTTP 401"""

    def __init__(self, message: str = "API key is invalid or unauthorized"):
        super().__init__(message)


class RateLimitError(OCRError):
    """Raised on HTTP 429"""

    def __init__(
        self,
        message: str = "Rate limit exceeded, please retry later"
    ):
        super().__init__(message)


class DecodingError(OCRError):
    """Raised when a response body does not match any expected shape"""

    def __init__(self, message: str = "Failed to decode response data"):
        super().__init__(message)


class OCRAPIError(OCRError):
    """Raised when the provider reports an error.

    Attributes:
        message: Diagnostic text extracted from the response.
        status_code: HTTP status of the response, if known.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"API error: {message}")


class OCRCancelledError(OCRError):
    """Raised when the caller cancels an OCR call between attempts"""

    def __init__(self, message: str = "OCR request was cancelled"):
        super().__init__(message)
