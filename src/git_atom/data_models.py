"""
Data models for Atom feed generation.
"""

from dataclasses import dataclass, field
from datetime import datetime

from ..shared_utilities.git_history import CommitInfo
from .config import FEED_FILENAME


@dataclass(frozen=True)
class Author:
    """A person who committed to a content file."""

    name: str
    email: str | None = None

    @classmethod
    def from_commit(cls, commit: CommitInfo) -> "Author":
        return cls(name=commit.author_name, email=commit.author_email)


@dataclass(frozen=True)
class FeedEntry:
    """One syndication item, derived from a content file and its history."""

    id: str
    title: str
    link: str
    path: str  # content path, breaks ordering ties
    published: datetime
    updated: datetime
    authors: tuple[Author, ...] = ()
    preview: str | None = None

    def __post_init__(self):
        if self.published > self.updated:
            raise ValueError(
                f"Entry {self.id} published ({self.published.isoformat()}) "
                f"after it was updated ({self.updated.isoformat()})"
            )


@dataclass
class FeedDocument:
    """A complete feed: metadata plus ordered, deduplicated entries."""

    id: str
    title: str
    updated: datetime
    entries: list[FeedEntry] = field(default_factory=list)
    authors: list[Author] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)  # dropped during dedup

    @property
    def self_link(self) -> str:
        """Absolute URL of the feed itself."""
        return f"{self.id}/{FEED_FILENAME}"


__all__ = ["Author", "CommitInfo", "FeedDocument", "FeedEntry"]
