"""
Configuration for the git-atom preprocessor.

Read from the ``[preprocessor.git-atom]`` table of ``book.toml``::

    [preprocessor.git-atom]
    base_url = "https://example.com/book/"
    article_preview_lines = 3
    target_number_of_entries = 20
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ..shared_utilities import get_logger
from .exceptions import ConfigError

logger = get_logger(__name__)

PREPROCESSOR_NAME = "git-atom"
DEFAULT_FEED_TITLE = "Recent updates"
FEED_FILENAME = "atom.xml"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class AtomConfig:
    """Validated settings for one feed generation run."""

    base_url: str
    # 0 means no preview, -1 means the whole article
    article_preview_lines: int = 0
    # 0 keeps every entry, n > 0 keeps the n most recently updated
    target_number_of_entries: int = 0
    title: str = DEFAULT_FEED_TITLE
    authors: list[str] = field(default_factory=list)
    book_src: str = "src"
    root: str = "."

    def __post_init__(self):
        """Validate fields and normalize the base URL."""
        if not isinstance(self.base_url, str) or not self.base_url.strip():
            raise ConfigError("base_url", "a non-empty URL is required")

        base_url = self.base_url.strip().rstrip("/")
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(
                "base_url", f"expected an absolute http(s) URL, got {self.base_url!r}"
            )
        self.base_url = base_url

        if not _is_int(self.article_preview_lines) or self.article_preview_lines < -1:
            raise ConfigError(
                "article_preview_lines",
                f"expected -1, 0 or a positive number, got {self.article_preview_lines!r}",
            )

        if (
            not _is_int(self.target_number_of_entries)
            or self.target_number_of_entries < 0
        ):
            raise ConfigError(
                "target_number_of_entries",
                f"expected 0 or a positive number, got {self.target_number_of_entries!r}",
            )

        if not isinstance(self.title, str) or not self.title.strip():
            self.title = DEFAULT_FEED_TITLE

        self.authors = [str(a) for a in self.authors if str(a).strip()]

    @property
    def content_path(self) -> Path:
        """Directory holding the book sources."""
        return Path(self.root) / self.book_src

    @property
    def feed_path(self) -> Path:
        """Where the generated feed is written."""
        return self.content_path / FEED_FILENAME

    @classmethod
    def from_preprocessor_context(
        cls, context: dict[str, Any], name: str = PREPROCESSOR_NAME
    ) -> "AtomConfig":
        """Build the configuration from mdBook's preprocessor context.

        Args:
            context: The context object of the preprocessor input
            name: Preprocessor table name in ``book.toml``

        Raises:
            ConfigError: If the preprocessor table or a field is invalid
        """
        book_config = context.get("config") or {}
        section = (book_config.get("preprocessor") or {}).get(name)
        if not isinstance(section, dict):
            raise ConfigError(
                f"preprocessor.{name}", "section missing from book configuration"
            )

        if "base_url" not in section:
            raise ConfigError("base_url", "a non-empty URL is required")

        book = book_config.get("book") or {}
        authors = book.get("authors") or []
        if isinstance(authors, str):
            authors = [authors]

        config = cls(
            base_url=section["base_url"],
            article_preview_lines=section.get("article_preview_lines", 0),
            target_number_of_entries=section.get("target_number_of_entries", 0),
            title=book.get("title") or DEFAULT_FEED_TITLE,
            authors=list(authors),
            book_src=str(book.get("src") or "src"),
            root=str(context.get("root") or "."),
        )

        logger.debug(
            "Loaded atom configuration",
            base_url=config.base_url,
            preview_lines=config.article_preview_lines,
            target_entries=config.target_number_of_entries,
        )
        return config
