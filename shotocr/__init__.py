"""shotocr: screenshot-to-text through third-party vision APIs."""

__version__ = "0.1.0"
