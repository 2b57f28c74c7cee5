"""
Recently updated chapter lists.

Replaces every ``{{#recently_updated}}`` marker in the book with a markdown
list of the chapters whose git history changed most recently.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..shared_utilities import (
    ContentFile,
    GitHistoryReader,
    HistoryReader,
    HistoryUnavailable,
    collect_content_files,
    for_each_chapter,
    get_logger,
    iter_chapters,
    trace_function,
)
from .config import UpdatedConfig

MARKER_RE = re.compile(r"\{\{#recently_updated}}")


@dataclass(frozen=True)
class UpdatedPage:
    """A chapter and the date of its latest commit."""

    title: str
    path: str
    last_modified: datetime

    def list_link(self) -> str:
        day = self.last_modified.astimezone(timezone.utc).strftime("%Y-%m-%d")
        return f"- [{self.title}](/{self.path}) ({day})"


class RecentlyUpdatedProcessor:
    """Fills in recently updated lists from the repository history."""

    def __init__(self, config: UpdatedConfig, history_reader: HistoryReader | None = None):
        self.logger = get_logger(__name__)
        self.config = config
        self._history_reader = history_reader

    @property
    def history_reader(self) -> HistoryReader:
        # Opened lazily so books without markers never touch git
        if self._history_reader is None:
            self._history_reader = GitHistoryReader(self.config.root)
        return self._history_reader

    def recent_pages(self, content_files: list[ContentFile]) -> list[UpdatedPage]:
        """Pages with history, newest first, limited to the configured count."""
        pages = []
        for content in content_files:
            try:
                commits = self.history_reader.history(content.source_path)
            except HistoryUnavailable:
                continue
            if not commits:
                continue

            pages.append(
                UpdatedPage(
                    title=content.title or content.path,
                    path=content.path,
                    last_modified=max(c.timestamp for c in commits),
                )
            )

        pages.sort(key=lambda p: p.path)
        pages.sort(key=lambda p: p.last_modified, reverse=True)

        limit = self.config.target_number_of_entries
        return pages[:limit] if limit > 0 else pages

    @staticmethod
    def generate_markdown(pages: list[UpdatedPage], indentation_prefix: str = "") -> str:
        return "".join(f"{indentation_prefix}{page.list_link()}\n" for page in pages)

    def process_chapter(self, content: str, pages: list[UpdatedPage]) -> str:
        """Replace every marker in a chapter's content with the list."""
        listing = self.generate_markdown(pages)
        return MARKER_RE.sub(lambda _: listing, content)

    @trace_function("recently_updated.run")
    def run(self, book: dict[str, Any]) -> dict[str, Any]:
        """Process the book in place and return it."""
        if not any(
            MARKER_RE.search(chapter.get("content") or "")
            for chapter in iter_chapters(book)
        ):
            self.logger.debug("No recently updated markers found")
            return book

        pages = self.recent_pages(collect_content_files(book, self.config.book_src))
        self.logger.info("Listing recently updated pages", count=len(pages))

        def update(chapter: dict[str, Any]) -> None:
            if chapter.get("content"):
                chapter["content"] = self.process_chapter(chapter["content"], pages)

        for_each_chapter(book, update)
        return book


def run_preprocessor(context: dict[str, Any], book: dict[str, Any]) -> dict[str, Any]:
    """Entry point for the mdBook preprocessor protocol."""
    config = UpdatedConfig.from_preprocessor_context(context)
    return RecentlyUpdatedProcessor(config).run(book)
