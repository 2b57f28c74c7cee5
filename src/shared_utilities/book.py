"""
mdBook preprocessor input handling.

mdBook hands a preprocessor a JSON array ``[context, book]`` on stdin and
expects the book back on stdout. Chapters live under ``sections`` (mdBook
0.4) or ``items`` (0.5) and nest through ``sub_items``.
"""

import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import IO, Any

from .logging_config import get_logger

logger = get_logger(__name__)


class BookFormatError(ValueError):
    """The preprocessor input is not a valid ``[context, book]`` pair."""

    pass


@dataclass(frozen=True)
class ContentFile:
    """One chapter of the book that gets attributed a feed entry."""

    path: str  # relative to the book source directory, e.g. "guide/intro.md"
    source_path: str  # relative to the book root, used for history lookups
    title: str | None = None
    body: str | None = None


def parse_preprocessor_input(stream: IO[str]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Read the ``[context, book]`` pair mdBook sends to preprocessors."""
    try:
        data = json.load(stream)
    except json.JSONDecodeError as e:
        raise BookFormatError(f"Preprocessor input is not valid JSON: {e}") from e

    if not isinstance(data, list) or len(data) != 2:
        raise BookFormatError("Preprocessor input must be a [context, book] array")

    context, book = data
    if not isinstance(context, dict) or not isinstance(book, dict):
        raise BookFormatError("Preprocessor context and book must be JSON objects")

    return context, book


def write_book(book: dict[str, Any], stream: IO[str]) -> None:
    """Write the book back in the shape it was received."""
    json.dump(book, stream)


def _book_items(book: dict[str, Any]) -> list[Any]:
    if "items" in book:
        return book["items"] or []
    return book.get("sections") or []


def iter_chapters(book: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield every chapter object depth first, in table of contents order."""

    def walk(items: list[Any]) -> Iterator[dict[str, Any]]:
        for item in items:
            # Separators and part titles are plain strings or non-chapter dicts
            if not isinstance(item, dict) or "Chapter" not in item:
                continue
            chapter = item["Chapter"]
            yield chapter
            yield from walk(chapter.get("sub_items") or [])

    yield from walk(_book_items(book))


def for_each_chapter(
    book: dict[str, Any], callback: Callable[[dict[str, Any]], None]
) -> None:
    """Call ``callback`` on every chapter so it can modify it in place."""
    for chapter in iter_chapters(book):
        callback(chapter)


def collect_content_files(book: dict[str, Any], book_src: str | Path) -> list[ContentFile]:
    """Map the book's chapters to content files.

    Draft chapters (no ``path``) have no rendered page and are skipped.

    Args:
        book: The book object from the preprocessor input
        book_src: Source directory of the book, relative to the book root
    """
    files = []
    for chapter in iter_chapters(book):
        path = chapter.get("path")
        if not path:
            logger.debug("Skipping draft chapter", name=chapter.get("name"))
            continue

        source = chapter.get("source_path") or path
        source_path = PurePosixPath(Path(book_src).as_posix()) / PurePosixPath(
            Path(source).as_posix()
        )
        files.append(
            ContentFile(
                path=PurePosixPath(Path(path).as_posix()).as_posix(),
                source_path=source_path.as_posix(),
                title=chapter.get("name"),
                body=chapter.get("content"),
            )
        )

    logger.debug("Collected content files", count=len(files))
    return files
