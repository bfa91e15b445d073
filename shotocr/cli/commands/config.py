"""Configuration command line tool.

Show, change and reset the stored OCR configuration.
"""

import json
import logging
from typing import Optional

import typer

from shotocr.cli.utils import resolve_config, setup_logging
from shotocr.ocr.config import (
    get_config_path,
    load_config,
    reset_config,
    save_config,
)

logger = logging.getLogger("shotocr.config")
app = typer.Typer(help="Configuration commands")


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
    Configuration command line tool
    """
    global logger
    logger = setup_logging(debug, "shotocr.config")


@app.command("show")
def show(
    config_file: Optional[str] = typer.Option(
        None, "--config", envvar="SHOTOCR_CONFIG",
        help="Configuration file",
    ),
    reveal: bool = typer.Option(
        False, "--reveal", help="Print the API key unmasked",
    ),
):
    """Print the stored configuration."""
    config = load_config(config_file)
    data = config.to_dict()
    if data["api_key"] and not reveal:
        data["api_key"] = "***"
    typer.echo(f"# {get_config_path(config_file)}")
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))
    if not config.is_valid():
        typer.echo(
            "Configuration is incomplete: API key, endpoint and model "
            "are required",
            err=True,
        )


@app.command("set")
def set_config(
    provider: Optional[str] = typer.Option(
        None, "--provider", "-p",
        help="Provider (openai, deepseek, anthropic, baidu, custom)",
    ),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key"),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", help="API endpoint URL",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Model name",
    ),
    max_tokens: Optional[int] = typer.Option(
        None, "--max-tokens", help="Maximum tokens in the answer",
    ),
    prompt: Optional[str] = typer.Option(
        None, "--prompt", help="Instruction sent along with the image",
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", envvar="SHOTOCR_CONFIG",
        help="Configuration file",
    ),
):
    """Update the stored configuration.

    Changing the provider resets endpoint and model to the new provider's
    defaults unless they are given too.
    """
    try:
        config = resolve_config(
            provider, api_key, endpoint, model, max_tokens, prompt,
            config_file
        )
        path = save_config(config, config_file)
    except (ValueError, OSError) as e:
        typer.echo(f"Failed to save configuration: {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Configuration saved to {path}")


@app.command("reset")
def reset(
    config_file: Optional[str] = typer.Option(
        None, "--config", envvar="SHOTOCR_CONFIG",
        help="Configuration file",
    ),
):
    """Restore the default configuration."""
    try:
        reset_config(config_file)
    except OSError as e:
        typer.echo(f"Failed to reset configuration: {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Configuration reset: {get_config_path(config_file)}")
