"""
Main CLI entry point for shotocr
"""
import typer

from shotocr.cli.commands import config, ocr

app = typer.Typer(
    name="shotocr",
    help="Extract text from screenshots with vision APIs",
    add_completion=False,
)

# Register ocr commands
app.add_typer(ocr.app, name="ocr", help="OCR related commands")

# Register config commands
app.add_typer(config.app, name="config", help="Stored configuration commands")


def main():
    """Main entry point for the CLI"""
    app()


if __name__ == "__main__":
    main()
