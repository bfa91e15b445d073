"""Example of using the OCR service.

This example demonstrates how to check a provider connection and then
recognize text in a screenshot. Set SHOTOCR_PROVIDER and SHOTOCR_API_KEY
before running, and pass the screenshot path as the only argument.
"""

import sys
import threading

from shotocr.ocr import OCRConfig, OCRError, OCRService
from shotocr.ocr.utils import load_png_bytes


def main():
    """Example of using the OCR service.

    This example shows how to:
    1. Load configuration from the environment
    2. Test the connection with a placeholder image
    3. Recognize text in a screenshot, with a cancel handle
    """
    if len(sys.argv) != 2:
        print("Usage: recognize_screenshot.py <image>")
        sys.exit(1)

    config = OCRConfig.from_env()
    if not config.is_valid():
        print("Set SHOTOCR_API_KEY (and SHOTOCR_ENDPOINT/SHOTOCR_MODEL "
              "for the custom provider)")
        sys.exit(1)

    service = OCRService(config)
    cancel_event = threading.Event()

    try:
        print(service.test_connection())

        image = load_png_bytes(sys.argv[1])
        text = service.recognize(image, cancel_event=cancel_event)
        print(f"\nRecognized text:\n{text}")

    except OCRError as e:
        print(f"Error: {str(e)}")


if __name__ == "__main__":
    main()
