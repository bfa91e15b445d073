"""OCR command line tool.

This module provides command-line interface for OCR operations.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from shotocr.cli.utils import resolve_config, setup_logging
from shotocr.ocr import OCRError, OCRService
from shotocr.ocr.config import OCRConfig, Provider
from shotocr.ocr.utils import load_png_bytes

# Configure logging
logger = logging.getLogger("shotocr.ocr")
app = typer.Typer(help="OCR commands")


@app.callback()
def callback(
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode",
    ),
):
    """
    OCR command line tool
    """
    global logger
    logger = setup_logging(debug, "shotocr.ocr")


def get_service(config: OCRConfig, fail_fast: bool = False) -> OCRService:
    """Validate configuration and create the OCR service.

    Raises:
        typer.Exit: If the configuration is incomplete
    """
    try:
        config.validate()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {str(e)}", err=True)
        raise typer.Exit(1)
    return OCRService(config, fail_fast=fail_fast)


def _provider_option():
    return typer.Option(
        None,
        "--provider",
        "-p",
        envvar="SHOTOCR_PROVIDER",
        help="Provider to use (openai, deepseek, anthropic, baidu, custom)",
    )


def _api_key_option():
    return typer.Option(
        None,
        "--api-key",
        envvar="SHOTOCR_API_KEY",
        help="API key (Baidu: access token)",
    )


def _endpoint_option():
    return typer.Option(
        None,
        "--endpoint",
        envvar="SHOTOCR_ENDPOINT",
        help="API endpoint URL (default: provider default)",
    )


def _model_option():
    return typer.Option(
        None,
        "--model",
        "-m",
        envvar="SHOTOCR_MODEL",
        help="Model name (default: provider default)",
    )


def _config_file_option():
    return typer.Option(
        None,
        "--config",
        envvar="SHOTOCR_CONFIG",
        help="Configuration file (default: ~/.config/shotocr/config.json)",
    )


@app.command("recognize")
def recognize(
    image: str = typer.Argument(
        ...,
        help="Image file to recognize, or '-' to read from stdin",
    ),
    provider: Optional[str] = _provider_option(),
    api_key: Optional[str] = _api_key_option(),
    endpoint: Optional[str] = _endpoint_option(),
    model: Optional[str] = _model_option(),
    max_tokens: Optional[int] = typer.Option(
        None,
        "--max-tokens",
        envvar="SHOTOCR_MAX_TOKENS",
        help="Maximum tokens in the answer",
    ),
    prompt: Optional[str] = typer.Option(
        None,
        "--prompt",
        envvar="SHOTOCR_PROMPT",
        help="Instruction sent along with the image",
    ),
    config_file: Optional[str] = _config_file_option(),
    output: Optional[Path] = typer.Option(
        None,
        "-o", "--output",
        help="Output file path (default: stdout)",
    ),
    fail_fast: bool = typer.Option(
        False,
        "--fail-fast",
        help="Do not retry authentication and decoding errors",
    ),
):
    """
    Recognize text in a screenshot

    Features:
    - Accepts any image Pillow can read, converted to PNG
    - Automatic retry (3 attempts); rate limits back off progressively
    - Provider error details are reported as-is
    """
    try:
        config = resolve_config(
            provider, api_key, endpoint, model, max_tokens, prompt,
            config_file
        )
    except ValueError as e:
        typer.echo(f"Invalid configuration: {str(e)}", err=True)
        raise typer.Exit(1)
    service = get_service(config, fail_fast=fail_fast)

    try:
        if image == "-":
            image_data = load_png_bytes(sys.stdin.buffer.read())
        else:
            image_path = Path(image)
            if not image_path.exists():
                typer.echo(f"Image not found: {image}", err=True)
                raise typer.Exit(1)
            image_data = load_png_bytes(image_path)
    except (OSError, ValueError) as e:
        typer.echo(f"Failed to read image: {str(e)}", err=True)
        raise typer.Exit(1)

    try:
        text = service.recognize(image_data)
    except OCRError as e:
        logger.error(
            "Failed to recognize text: %s",
            str(e),
            exc_info=True
        )
        typer.echo(f"Failed to recognize text: {str(e)}", err=True)
        raise typer.Exit(1)

    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(f"{text}\n")
    else:
        typer.echo(text)


@app.command("test-connection")
def test_connection(
    provider: Optional[str] = _provider_option(),
    api_key: Optional[str] = _api_key_option(),
    endpoint: Optional[str] = _endpoint_option(),
    model: Optional[str] = _model_option(),
    config_file: Optional[str] = _config_file_option(),
):
    """Check that the endpoint and API key work, using a placeholder image."""
    try:
        config = resolve_config(
            provider, api_key, endpoint, model, config_file=config_file
        )
    except ValueError as e:
        typer.echo(f"Invalid configuration: {str(e)}", err=True)
        raise typer.Exit(1)
    service = get_service(config)

    try:
        message = service.test_connection()
    except OCRError as e:
        logger.error("Connection test failed: %s", str(e))
        typer.echo(f"Connection test failed: {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(message)


@app.command("list-providers")
def list_providers():
    """List all supported OCR providers."""
    typer.echo("Supported OCR providers:")
    for item in Provider:
        typer.echo(f"  - {item.value}")


@app.command("provider-info")
def provider_info(
    provider: str = typer.Argument(
        ...,
        help="Provider name to get information for",
    ),
):
    """Show the protocol and defaults of a provider."""
    try:
        item = Provider.from_name(provider)
    except ValueError as e:
        typer.echo(f"Failed to get provider info: {str(e)}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Provider: {item.value}")
    typer.echo(f"  Protocol: {item.protocol.value}")
    typer.echo(f"  Default endpoint: {item.default_endpoint or '(required)'}")
    typer.echo(f"  Default model: {item.default_model or '(required)'}")
