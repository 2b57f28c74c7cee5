"""
Shared mdBook preprocessor protocol handling.
"""

import sys
from collections.abc import Callable
from typing import IO, Any

from .book import parse_preprocessor_input, write_book
from .logging_config import get_logger

logger = get_logger(__name__)

# mdBook release the preprocessors are built and tested against
MDBOOK_VERSION = "0.4.40"

SUPPORTED_RENDERERS = frozenset({"html"})


def supports_renderer(renderer: str) -> bool:
    """Check whether a renderer is supported by the preprocessors."""
    return renderer in SUPPORTED_RENDERERS


def check_mdbook_version(context: dict[str, Any], name: str) -> bool:
    """Warn when called from a different mdBook release line.

    Returns:
        True if the host version matches on major and minor version
    """
    host_version = str(context.get("mdbook_version", ""))
    if host_version.split(".")[:2] == MDBOOK_VERSION.split(".")[:2]:
        return True

    logger.warning(
        f"The {name} plugin was built against version {MDBOOK_VERSION} of mdbook, "
        f"but we're being called from version {host_version or 'unknown'}"
    )
    return False


def handle_preprocessing(
    name: str,
    run: Callable[[dict[str, Any], dict[str, Any]], dict[str, Any]],
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
) -> None:
    """Read ``[context, book]``, run the preprocessor and emit the book.

    Args:
        name: Preprocessor name, used for log messages
        run: Callable receiving context and book and returning the book
        stdin: Input stream (defaults to ``sys.stdin``)
        stdout: Output stream (defaults to ``sys.stdout``)
    """
    context, book = parse_preprocessor_input(stdin or sys.stdin)
    check_mdbook_version(context, name)

    processed_book = run(context, book)

    out = stdout or sys.stdout
    write_book(processed_book, out)
    out.flush()
