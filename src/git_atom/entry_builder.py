"""
Feed entry construction from content files and their commit history.
"""

import re
from datetime import datetime, timezone
from pathlib import PurePosixPath
from urllib.parse import quote, urlparse

from ..shared_utilities import ContentFile, get_logger
from ..shared_utilities.git_history import CommitInfo
from .config import AtomConfig
from .data_models import Author, FeedEntry
from .exceptions import InvalidEntry
from .feed_assembler import strip_invalid_xml_chars

logger = get_logger(__name__)

_README_RE = re.compile(r"(^|/)README\.md$")
_MD_SUFFIX_RE = re.compile(r"\.md$")


def html_path(content_path: str) -> str:
    """Map a chapter source path to the page mdBook renders for it."""
    path = _README_RE.sub(r"\1index.html", content_path)
    return _MD_SUFFIX_RE.sub(".html", path)


def _to_utc(timestamp: datetime) -> datetime:
    return timestamp.astimezone(timezone.utc)


class EntryBuilder:
    """Turns a content file and its commits into a :class:`FeedEntry`."""

    def __init__(self, config: AtomConfig):
        self.config = config

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{quote(path.lstrip('/'), safe='/')}"

    def _validate_url(self, content: ContentFile, url: str) -> None:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise InvalidEntry(content.path, f"link is not an absolute URL: {url!r}")
        if any(ch.isspace() for ch in url):
            raise InvalidEntry(content.path, f"link contains whitespace: {url!r}")

    def _title(self, content: ContentFile) -> str:
        title = strip_invalid_xml_chars(content.title or "").strip()
        if not title:
            title = strip_invalid_xml_chars(PurePosixPath(content.path).stem).strip()
        if not title:
            raise InvalidEntry(content.path, "no title and no file name to fall back on")
        return title

    def build(
        self,
        content: ContentFile,
        commits: list[CommitInfo],
        preview: str | None,
        run_started_at: datetime,
    ) -> FeedEntry:
        """Build the feed entry for one content file.

        Args:
            content: The chapter being syndicated
            commits: Its history, in any order
            preview: Extracted preview text, if any
            run_started_at: Timestamp used when the file has no history

        Raises:
            InvalidEntry: If the link or title cannot be made valid
        """
        link = self._url(html_path(content.path))
        entry_id = self._url(content.path)
        self._validate_url(content, link)
        self._validate_url(content, entry_id)

        if commits:
            timestamps = [_to_utc(c.timestamp) for c in commits]
            published, updated = min(timestamps), max(timestamps)
        else:
            published = updated = _to_utc(run_started_at)

        authors: list[Author] = []
        for commit in sorted(commits, key=lambda c: c.timestamp):
            author = Author.from_commit(commit)
            if author.name and author not in authors:
                authors.append(author)

        entry = FeedEntry(
            id=entry_id,
            title=self._title(content),
            link=link,
            path=content.path,
            published=published,
            updated=updated,
            authors=tuple(authors),
            preview=preview,
        )

        logger.debug(
            "Built feed entry",
            path=content.path,
            commits=len(commits),
            updated=updated.isoformat(),
        )
        return entry
