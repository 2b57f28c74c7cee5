"""
Commit history lookups against a local git working tree.

The reader shells out to the ``git`` executable and never writes to the
repository: every command runs with ``--no-optional-locks`` so that not even
the index stat cache gets refreshed.
"""

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .logging_config import get_logger
from .telemetry import trace_function

logger = get_logger(__name__)

# Unit and record separators keep commit subjects with "|" or newlines intact
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%s"]) + _RECORD_SEP


class GitHistoryError(Exception):
    """Base exception for history lookups."""

    pass


class RepositoryError(GitHistoryError):
    """The repository cannot be opened or read."""

    pass


class HistoryUnavailable(GitHistoryError):
    """The requested path is not tracked by the repository."""

    def __init__(self, path: str):
        super().__init__(f"No history available for untracked path: {path}")
        self.path = path


@dataclass(frozen=True)
class CommitInfo:
    """One commit that touched a path."""

    sha: str
    author_name: str
    timestamp: datetime  # timezone-aware author date
    author_email: str | None = None
    message: str | None = None


class HistoryReader(ABC):
    """Read-only access to per-path commit history."""

    @abstractmethod
    def history(self, path: str | Path) -> list[CommitInfo]:
        """Return the commits touching ``path``, oldest first.

        Raises:
            HistoryUnavailable: If the path is not tracked
            RepositoryError: If the repository cannot be read
        """


class GitHistoryReader(HistoryReader):
    """History reader backed by the ``git`` command line."""

    def __init__(self, repository_path: str | Path, git_executable: str = "git"):
        """Open a repository for reading.

        Args:
            repository_path: Any directory inside the working tree. Paths
                passed to :meth:`history` are resolved relative to it.
            git_executable: Name or path of the git binary

        Raises:
            RepositoryError: If the directory is not inside a git working tree
        """
        self.repository_path = Path(repository_path)
        self.git_executable = git_executable

        if not self.repository_path.is_dir():
            raise RepositoryError(
                f"Repository path does not exist: {self.repository_path}"
            )

        ok, output = self._git("rev-parse", "--is-inside-work-tree")
        if not ok or output.strip() != "true":
            raise RepositoryError(
                f"Not a git repository: {self.repository_path} ({output.strip()})"
            )

        # A freshly initialised repository has no HEAD to walk yet
        has_head, _ = self._git("rev-parse", "--verify", "--quiet", "HEAD")
        self.has_commits = has_head

        logger.debug(
            "Opened repository",
            path=str(self.repository_path),
            has_commits=self.has_commits,
        )

    def _git(self, *args: str) -> tuple[bool, str]:
        """Run a git command and return success status and output."""
        cmd = [self.git_executable, "--no-optional-locks", *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=self.repository_path,
                check=False,
            )
        except OSError as e:
            raise RepositoryError(f"Unable to run {self.git_executable}: {e}") from e

        if result.returncode != 0:
            return False, result.stderr
        return True, result.stdout

    def is_tracked(self, path: str | Path) -> bool:
        """Check whether ``path`` is present in the index."""
        ok, _ = self._git("ls-files", "--error-unmatch", "--", Path(path).as_posix())
        return ok

    @trace_function("git_history.history")
    def history(self, path: str | Path) -> list[CommitInfo]:
        """Return every commit touching ``path``, oldest first.

        Renames are followed, so a page that was moved keeps the commits made
        under its previous names.
        """
        posix_path = Path(path).as_posix()
        commits: list[CommitInfo] = []

        if self.has_commits:
            ok, output = self._git(
                "log", "--follow", f"--format={_LOG_FORMAT}", "--", posix_path
            )
            if not ok:
                raise RepositoryError(
                    f"git log failed for {posix_path}: {output.strip()}"
                )
            commits = self._parse_log(output)

        if not commits:
            if not self.is_tracked(posix_path):
                raise HistoryUnavailable(posix_path)
            logger.debug("Tracked path has no commits yet", path=posix_path)
            return []

        # git log lists newest first
        commits.reverse()
        return commits

    def _parse_log(self, output: str) -> list[CommitInfo]:
        """Parse ``git log`` output produced with ``_LOG_FORMAT``."""
        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue

            fields = record.split(_FIELD_SEP)
            if len(fields) != 5:
                raise RepositoryError(f"Unexpected git log record: {record!r}")

            sha, name, email, date, subject = fields
            try:
                timestamp = datetime.fromisoformat(date)
            except ValueError as e:
                raise RepositoryError(
                    f"Invalid commit date {date!r} in {sha}"
                ) from e

            commits.append(
                CommitInfo(
                    sha=sha,
                    author_name=name,
                    author_email=email or None,
                    timestamp=timestamp,
                    message=subject or None,
                )
            )
        return commits
