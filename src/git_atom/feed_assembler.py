"""
Atom feed assembly and serialization.

Entries are ordered newest first, deduplicated by id and serialized with
feedgen. XML escaping is left to the serializer; characters XML 1.0 cannot
represent at all are stripped beforehand.
"""

import re
from collections.abc import Iterable
from datetime import datetime, timezone

from feedgen.feed import FeedGenerator

from ..shared_utilities import get_logger, trace_function
from .config import AtomConfig
from .data_models import Author, FeedDocument, FeedEntry
from .exceptions import SerializationError

logger = get_logger(__name__)

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
GENERATOR_NAME = "mdbook-git-atom"

# Everything outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def strip_invalid_xml_chars(text: str) -> str:
    """Remove characters that cannot appear in an XML 1.0 document."""
    return _INVALID_XML_CHARS.sub("", text)


class FeedAssembler:
    """Builds the feed document for a book and serializes it."""

    def __init__(self, config: AtomConfig):
        self.config = config

    def _deduplicate(self, entries: Iterable[FeedEntry]) -> tuple[list[FeedEntry], list[str]]:
        by_id: dict[str, FeedEntry] = {}
        duplicates: list[str] = []
        for entry in entries:
            if entry.id in by_id:
                logger.warning(
                    "Duplicate feed entry id, keeping the later entry",
                    id=entry.id,
                    dropped=by_id[entry.id].path,
                    kept=entry.path,
                )
                duplicates.append(entry.id)
            by_id[entry.id] = entry
        return list(by_id.values()), duplicates

    @staticmethod
    def sort_entries(entries: Iterable[FeedEntry]) -> list[FeedEntry]:
        """Newest update first, ties broken by path ascending."""
        by_path = sorted(entries, key=lambda e: e.path)
        # sorted() is stable with reverse=True, so path order survives ties
        return sorted(by_path, key=lambda e: e.updated, reverse=True)

    def assemble(
        self, entries: Iterable[FeedEntry], run_started_at: datetime
    ) -> FeedDocument:
        """Order, deduplicate and limit entries into a feed document.

        Args:
            entries: Entry records for every content file of the book
            run_started_at: Feed ``updated`` value when there are no entries
        """
        unique, duplicates = self._deduplicate(entries)
        ordered = self.sort_entries(unique)

        limit = self.config.target_number_of_entries
        if limit > 0:
            ordered = ordered[:limit]

        updated = ordered[0].updated if ordered else run_started_at.astimezone(
            timezone.utc
        )

        authors = [Author(name=name) for name in self.config.authors]
        if not authors:
            # Atom requires a feed-level author unless every entry has one
            authors = [Author(name=self.config.title)]

        return FeedDocument(
            id=self.config.base_url,
            title=self.config.title,
            updated=updated,
            entries=ordered,
            authors=authors,
            duplicate_ids=duplicates,
        )

    @staticmethod
    def _people(authors: Iterable[Author]) -> list[dict[str, str]]:
        people = []
        for author in authors:
            person = {"name": strip_invalid_xml_chars(author.name)}
            if author.email:
                person["email"] = strip_invalid_xml_chars(author.email)
            if person["name"]:
                people.append(person)
        return people

    @trace_function("feed_assembler.serialize")
    def serialize(self, document: FeedDocument) -> str:
        """Serialize a feed document as an Atom 1.0 XML string.

        Raises:
            SerializationError: If the serializer rejects the content
        """
        clean = strip_invalid_xml_chars

        try:
            fg = FeedGenerator()
            fg.id(clean(document.id))
            fg.title(clean(document.title))
            fg.updated(document.updated)
            feed_people = self._people(document.authors)
            if feed_people:
                fg.author(feed_people)
            fg.link(href=clean(document.id) + "/", rel="alternate")
            fg.link(href=clean(document.self_link), rel="self")
            fg.generator(GENERATOR_NAME)

            for entry in document.entries:
                fe = fg.add_entry(order="append")
                fe.id(clean(entry.id))
                fe.title(clean(entry.title))
                fe.link(href=clean(entry.link), rel="alternate")
                fe.updated(entry.updated)
                fe.published(entry.published)
                people = self._people(entry.authors)
                if people:
                    fe.author(people)
                if entry.preview:
                    fe.content(clean(entry.preview), type="text")

            xml = fg.atom_str(pretty=True, encoding="UTF-8")
        except (ValueError, TypeError) as e:
            raise SerializationError(f"Unable to serialize feed: {e}") from e

        return xml.decode("utf-8")

    def render(self, entries: Iterable[FeedEntry], run_started_at: datetime) -> str:
        """Assemble and serialize in one step."""
        document = self.assemble(entries, run_started_at)
        logger.info(
            "Assembled feed",
            entries=len(document.entries),
            duplicates=len(document.duplicate_ids),
        )
        return self.serialize(document)
