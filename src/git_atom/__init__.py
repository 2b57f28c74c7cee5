"""
Atom feed generation for mdBook books.

Dates every chapter from its git history and writes an Atom 1.0 feed.
"""

from .config import AtomConfig
from .core import AtomFeedGenerator, run_preprocessor
from .data_models import Author, FeedDocument, FeedEntry
from .entry_builder import EntryBuilder
from .exceptions import ConfigError, GitAtomError, InvalidEntry, SerializationError
from .feed_assembler import FeedAssembler
from .preview import extract_preview

__all__ = [
    "AtomConfig",
    "AtomFeedGenerator",
    "run_preprocessor",
    "Author",
    "FeedDocument",
    "FeedEntry",
    "EntryBuilder",
    "FeedAssembler",
    "extract_preview",
    "ConfigError",
    "GitAtomError",
    "InvalidEntry",
    "SerializationError",
]
