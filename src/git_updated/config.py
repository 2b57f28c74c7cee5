"""
Configuration for the git-updated preprocessor.
"""

from dataclasses import dataclass
from typing import Any

from ..shared_utilities import ConfigError

PREPROCESSOR_NAME = "git-updated"
DEFAULT_TARGET_ENTRIES = 10


@dataclass
class UpdatedConfig:
    """Settings for the recently updated list."""

    # 0 lists every chapter with history
    target_number_of_entries: int = DEFAULT_TARGET_ENTRIES
    book_src: str = "src"
    root: str = "."

    def __post_init__(self):
        value = self.target_number_of_entries
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigError(
                "target_number_of_entries",
                f"expected 0 or a positive number, got {value!r}",
            )

    @classmethod
    def from_preprocessor_context(
        cls, context: dict[str, Any], name: str = PREPROCESSOR_NAME
    ) -> "UpdatedConfig":
        """Build the configuration from mdBook's preprocessor context."""
        book_config = context.get("config") or {}
        section = (book_config.get("preprocessor") or {}).get(name) or {}
        book = book_config.get("book") or {}

        return cls(
            target_number_of_entries=section.get(
                "target_number_of_entries", DEFAULT_TARGET_ENTRIES
            ),
            book_src=str(book.get("src") or "src"),
            root=str(context.get("root") or "."),
        )
