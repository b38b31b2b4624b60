"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# httpx cleanup on a closed loop is cosmetic
warnings.filterwarnings("ignore", message=".*Event loop is closed.*")
warnings.filterwarnings("ignore", category=ResourceWarning)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

# Create Typer app
app = typer.Typer(
    name="socials-publisher",
    help="Publish images, reels, stories, and carousels through the Instagram Graph API",
    add_completion=False,
)


def register_commands() -> None:
    """Register all commands from feature modules."""
    from .publish.commands import publish, resources

    app.command(name="publish")(publish)
    app.command(name="resources")(resources)


def _attach_file_handler(logger_name: str, log_file: Path) -> logging.Logger:
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.handlers = []  # Clear any existing handlers
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def setup_logging(log_dir: Optional[Path] = None) -> None:
    """Configure logging for CLI.

    - Suppresses console output from libraries
    - Writes Graph API traffic to instagram_api.log
    - Writes item lifecycle events to publish_pipeline.log

    Logs go to ``./logs`` under the working directory unless ``log_dir`` is given.
    """
    if log_dir is None:
        log_dir = Path.cwd() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    # Remove any default console handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    # Suppress loggers that might print to console
    for logger_name in ["httpx", "httpcore", "asyncio"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    _attach_file_handler("instagram_api", log_dir / "instagram_api.log")
    _attach_file_handler("publish_pipeline", log_dir / "publish_pipeline.log")


# Initialize logging on module import
setup_logging()

# Register all commands
register_commands()


def main() -> None:
    """CLI entry point."""
    app()
