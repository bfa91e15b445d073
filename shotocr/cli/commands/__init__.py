"""CLI commands package."""

from shotocr.cli.commands import config, ocr

__all__ = [
    'config',
    'ocr'
]
