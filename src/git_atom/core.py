"""
Core Atom feed generation.
"""

import time
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..shared_utilities import (
    ContentFile,
    GitHistoryReader,
    HistoryReader,
    HistoryUnavailable,
    collect_content_files,
    get_logger,
    get_logging_manager,
    trace_function,
)
from ..shared_utilities.git_history import CommitInfo
from .config import AtomConfig
from .data_models import FeedEntry
from .entry_builder import EntryBuilder
from .feed_assembler import FeedAssembler
from .preview import extract_preview


class AtomFeedGenerator:
    """
    Generates the Atom feed for one book.

    Each call to :meth:`generate` is a full regeneration: nothing is cached
    between runs and the repository is only ever read.
    """

    def __init__(self, config: AtomConfig, history_reader: HistoryReader | None = None):
        """Initialize the generator.

        Args:
            config: Validated feed configuration
            history_reader: Commit history source, defaults to the git
                repository at the book root

        Raises:
            RepositoryError: If no reader is given and the book root is not
                inside a git repository
        """
        self.logger = get_logger(__name__)
        self.config = config
        self.history_reader = history_reader or GitHistoryReader(config.root)
        self.entry_builder = EntryBuilder(config)
        self.assembler = FeedAssembler(config)

    def _history(self, content: ContentFile) -> list[CommitInfo]:
        try:
            return self.history_reader.history(content.source_path)
        except HistoryUnavailable:
            self.logger.debug(
                "No history for content file, using run start time",
                path=content.source_path,
            )
            return []

    def build_entries(
        self, content_files: Iterable[ContentFile], run_started_at: datetime
    ) -> list[FeedEntry]:
        """Build one entry per content file, in input order."""
        entries = []
        for content in content_files:
            commits = self._history(content)
            preview = extract_preview(content.body, self.config.article_preview_lines)
            entries.append(
                self.entry_builder.build(content, commits, preview, run_started_at)
            )
        return entries

    @trace_function("generate_atom_feed")
    def generate(
        self,
        content_files: Iterable[ContentFile],
        run_started_at: datetime | None = None,
    ) -> str:
        """Generate the feed XML for the given content files.

        Args:
            content_files: Chapters of the book
            run_started_at: Fallback timestamp for files without history.
                Read from the clock once when not given.

        Returns:
            The serialized Atom document
        """
        if run_started_at is None:
            run_started_at = datetime.now(timezone.utc)

        manager = get_logging_manager()
        manager.log_operation_start("generate_atom_feed", base_url=self.config.base_url)
        start_time = time.time()

        try:
            entries = self.build_entries(content_files, run_started_at)
            feed_xml = self.assembler.render(entries, run_started_at)
        except Exception as e:
            manager.log_operation_error("generate_atom_feed", e)
            raise

        manager.log_operation_complete(
            "generate_atom_feed", time.time() - start_time, entries=len(entries)
        )
        return feed_xml

    def write(self, feed_xml: str) -> Path:
        """Write the feed next to the book's table of contents."""
        feed_path = self.config.feed_path
        feed_path.parent.mkdir(parents=True, exist_ok=True)
        feed_path.write_text(feed_xml, encoding="utf-8")
        self.logger.info("Wrote atom feed", path=str(feed_path))
        return feed_path

    def run(self, book: dict[str, Any]) -> dict[str, Any]:
        """Generate and write the feed for a book; the book is not modified."""
        content_files = collect_content_files(book, self.config.book_src)
        self.write(self.generate(content_files))
        return book


def run_preprocessor(context: dict[str, Any], book: dict[str, Any]) -> dict[str, Any]:
    """Entry point for the mdBook preprocessor protocol."""
    config = AtomConfig.from_preprocessor_context(context)
    return AtomFeedGenerator(config).run(book)
