"""
Errors raised while generating the Atom feed.

Repository problems are reported by
:class:`~src.shared_utilities.git_history.RepositoryError`; everything here
aborts the run because a partially correct feed is worse than none.
"""

from ..shared_utilities.exceptions import ConfigError, PreprocessorError


class GitAtomError(PreprocessorError):
    """Base exception for feed generation."""

    pass


class InvalidEntry(GitAtomError):
    """A content file cannot be turned into a valid feed entry."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Invalid feed entry for {path}: {message}")
        self.path = path


class SerializationError(GitAtomError):
    """The feed document could not be serialized to XML."""

    pass


__all__ = ["ConfigError", "GitAtomError", "InvalidEntry", "SerializationError"]
