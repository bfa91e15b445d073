"""Shared fixtures for OCR tests."""

import json

import pytest

from shotocr.ocr.config import OCRConfig, Provider
from shotocr.ocr.transport import BaseTransport, OCRResponse


class FakeTransport(BaseTransport):
    """Transport returning queued responses and recording requests.

    Queue items are OCRResponse objects or exceptions to raise.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests = []
        self.timeouts = []

    def send(self, request, timeout=60):
        self.requests.append(request)
        self.timeouts.append(timeout)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def json_response(payload, status_code=200):
    return OCRResponse(
        status_code=status_code,
        body=json.dumps(payload).encode("utf-8")
    )


@pytest.fixture
def openai_config():
    return OCRConfig.for_provider(Provider.OPENAI, api_key="test-key")


@pytest.fixture
def anthropic_config():
    return OCRConfig.for_provider(Provider.ANTHROPIC, api_key="test-key")


@pytest.fixture
def baidu_config():
    return OCRConfig.for_provider(Provider.BAIDU, api_key="test-token")
