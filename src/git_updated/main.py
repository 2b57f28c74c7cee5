"""
Main CLI entry point for the git-updated preprocessor.
"""

import sys

import click
from dotenv import load_dotenv

from ..shared_utilities import (
    BookFormatError,
    GitHistoryError,
    PreprocessorError,
    configure_logging,
    get_logger,
    handle_preprocessing,
    supports_renderer,
)
from .config import PREPROCESSOR_NAME
from .core import run_preprocessor

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx: click.Context) -> None:
    """
    A preprocessor that lists recently updated chapters.

    Replaces {{#recently_updated}} in chapter content with links to the
    chapters most recently changed in git.
    """
    configure_logging()

    if ctx.invoked_subcommand is not None:
        return

    try:
        handle_preprocessing(PREPROCESSOR_NAME, run_preprocessor)
    except (PreprocessorError, GitHistoryError, BookFormatError) as e:
        logger.error(f"{PREPROCESSOR_NAME}: {e}")
        sys.exit(1)


@main.command()
@click.argument("renderer")
def supports(renderer: str) -> None:
    """Check whether a renderer is supported by this preprocessor."""
    sys.exit(0 if supports_renderer(renderer) else 1)


if __name__ == "__main__":
    main()
