"""
Common utilities for CLI commands
"""
import logging
from typing import Optional

from shotocr.ocr.config import OCRConfig, Provider, load_config


def setup_logging(
    debug: bool = False,
    logger_name: Optional[str] = None,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging configuration for CLI commands

    Args:
        debug: Whether to enable debug mode
        logger_name: Name of the logger, defaults to 'shotocr'
        log_format: Custom log format string

    Returns:
        Configured logger instance
    """
    # Set default values
    if logger_name is None:
        logger_name = "shotocr"
    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    level = logging.DEBUG if debug else logging.INFO
    # Configure logging
    logging.basicConfig(
        level=level,
        format=log_format
    )

    # Get and configure logger
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if debug:
        logger.debug("Debug mode enabled for %s", logger_name)

    return logger


def resolve_config(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    endpoint: Optional[str] = None,
    model: Optional[str] = None,
    max_tokens: Optional[int] = None,
    prompt: Optional[str] = None,
    config_file: Optional[str] = None,
) -> OCRConfig:
    """Merge command-line options over the stored configuration.

    Switching provider resets endpoint and model to the new provider's
    defaults unless they are given explicitly.
    """
    config = load_config(config_file)
    if provider and Provider.from_name(provider) != config.provider:
        config = config.with_provider(provider)

    overrides = {
        "api_key": api_key,
        "endpoint": endpoint,
        "model": model,
        "max_tokens": max_tokens,
        "prompt": prompt,
    }
    data = config.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return OCRConfig.from_dict(data)
