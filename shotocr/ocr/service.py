"""OCR service implementation.

This module provides the dispatcher that runs one logical OCR call:
build the provider request, send it, parse the answer and retry when the
attempt fails.

Retry policy (3 attempts by default):
- RateLimitError waits retry_delay * attempt_number seconds
- any other OCRError waits retry_delay seconds
- the last error is raised once attempts run out
"""

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from shotocr.ocr.config import OCRConfig
from shotocr.ocr.errors import (
    DecodingError,
    OCRCancelledError,
    OCRError,
    RateLimitError,
    UnauthorizedError,
)
from shotocr.ocr.provider import BaseOCRProvider, get_provider
from shotocr.ocr.transport import (
    DEFAULT_TIMEOUT,
    TEST_TIMEOUT,
    BaseTransport,
    RequestsTransport,
)
from shotocr.ocr.utils import (
    PLACEHOLDER_IMAGE_BASE64,
    TEST_MAX_TOKENS,
    TEST_PROMPT,
    encode_image,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 3
RETRY_DELAY = 2.0


def _log_retry_attempt(retry_state: RetryCallState):
    """
    Log a failed attempt before waiting for the next one.

    Args:
        retry_state: The retry state object from tenacity
    """
    attempt_number = retry_state.attempt_number
    max_attempts = retry_state.retry_object.stop.max_attempt_number
    exception = retry_state.outcome.exception()
    wait_time = retry_state.next_action.sleep

    logger.warning(
        f"[OCR_RETRY] Attempt {attempt_number}/{max_attempts} failed. "
        f"Exception: {type(exception).__name__}: {exception}. "
        f"Waiting {wait_time:.2f}s before next attempt."
    )


class OCRService:
    """Service for OCR operations with a single provider"""

    def __init__(
        self,
        config: OCRConfig,
        transport: Optional[BaseTransport] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        fail_fast: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize OCR service

        Args:
            config: OCR configuration, assumed valid
            transport: Transport used to send requests, defaults to
                RequestsTransport
            max_attempts: Maximum number of attempts per call
            retry_delay: Base delay between attempts in seconds
            fail_fast: Do not retry UnauthorizedError and DecodingError
            sleep: Function used to wait between attempts
        """
        self.config = config
        self.provider: BaseOCRProvider = get_provider(config)
        self.transport = transport or RequestsTransport()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.fail_fast = fail_fast
        self._sleep = sleep

    def recognize(
        self,
        image: bytes,
        cancel_event: Optional[threading.Event] = None
    ) -> str:
        """
        Recognize text in a PNG image.

        Args:
            image: PNG image bytes
            cancel_event: Event that aborts the call between attempts

        Returns:
            str: Recognized text

        Raises:
            OCRError: The classified error of the last attempt
        """
        return self.recognize_base64(encode_image(image), cancel_event)

    def recognize_base64(
        self,
        image_base64: str,
        cancel_event: Optional[threading.Event] = None
    ) -> str:
        """Recognize text in an already base64-encoded PNG image."""
        logger.info(
            f"Starting OCR with {self.config.provider.value} "
            f"(model: {self.config.model})"
        )

        def attempt() -> str:
            request = self.provider.build_request(image_base64)
            response = self.transport.send(request, timeout=DEFAULT_TIMEOUT)
            return self.provider.parse_response(
                response.status_code,
                response.body
            )

        text = self._run_with_retry(attempt, cancel_event)
        logger.info(f"OCR completed, {len(text)} characters recognized")
        return text

    def test_connection(
        self,
        cancel_event: Optional[threading.Event] = None
    ) -> str:
        """
        Check that the endpoint and credentials work.

        Sends a placeholder image with a minimal prompt and token budget.
        Only one attempt is made.

        Returns:
            str: Confirmation message

        Raises:
            OCRError: If the provider rejects the request
        """
        logger.info(
            f"Testing connection to {self.config.provider.value} "
            f"at {self.config.endpoint}"
        )

        def attempt() -> None:
            request = self.provider.build_request(
                PLACEHOLDER_IMAGE_BASE64,
                prompt=TEST_PROMPT,
                max_tokens=TEST_MAX_TOKENS,
            )
            response = self.transport.send(request, timeout=TEST_TIMEOUT)
            self.provider.parse_test_response(
                response.status_code,
                response.body
            )

        self._run_with_retry(attempt, cancel_event, max_attempts=1)
        message = (
            f"Connection succeeded: {self.config.provider.value} "
            f"(model: {self.config.model})"
        )
        logger.info(message)
        return message

    def _should_retry(self, exception: BaseException) -> bool:
        if not isinstance(exception, OCRError):
            return False
        if isinstance(exception, OCRCancelledError):
            return False
        if self.fail_fast and isinstance(
            exception, (UnauthorizedError, DecodingError)
        ):
            logger.error(
                f"{type(exception).__name__} is not retried in "
                f"fail-fast mode"
            )
            return False
        return True

    def _wait_for(self, retry_state: RetryCallState) -> float:
        exception = retry_state.outcome.exception()
        if isinstance(exception, RateLimitError):
            return self.retry_delay * retry_state.attempt_number
        return self.retry_delay

    def _make_sleep(
        self,
        cancel_event: Optional[threading.Event]
    ) -> Callable[[float], None]:
        if cancel_event is None:
            return self._sleep

        def sleep(seconds: float) -> None:
            if cancel_event.wait(seconds):
                logger.info("OCR call cancelled while waiting to retry")
                raise OCRCancelledError()

        return sleep

    def _run_with_retry(
        self,
        func: Callable[[], T],
        cancel_event: Optional[threading.Event] = None,
        max_attempts: Optional[int] = None
    ) -> T:
        retryer = Retrying(
            stop=stop_after_attempt(max_attempts or self.max_attempts),
            wait=self._wait_for,
            retry=retry_if_exception(self._should_retry),
            before_sleep=_log_retry_attempt,
            sleep=self._make_sleep(cancel_event),
            reraise=True,
        )

        def attempt() -> T:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("OCR call cancelled before attempt")
                raise OCRCancelledError()
            return func()

        try:
            return retryer(attempt)
        except OCRError as e:
            logger.error(f"OCR failed: {type(e).__name__}: {e}")
            raise
