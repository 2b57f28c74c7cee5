"""
Pytest configuration and shared fixtures.
"""

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.git_atom.config import AtomConfig
from src.shared_utilities.git_history import CommitInfo, HistoryReader, HistoryUnavailable

RUN_STARTED_AT = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_commit(
    day: int,
    author: str = "Ada Lovelace",
    email: str | None = "ada@example.com",
    sha: str | None = None,
) -> CommitInfo:
    """Commit on the given day of January 2024."""
    return CommitInfo(
        sha=sha or f"{day:040d}",
        author_name=author,
        author_email=email,
        timestamp=datetime(2024, 1, day, 9, 30, tzinfo=timezone.utc),
        message=f"Update on day {day}",
    )


class FakeHistoryReader(HistoryReader):
    """In-memory history keyed by source path."""

    def __init__(self, histories: dict[str, list[CommitInfo]] | None = None):
        self.histories = histories or {}
        self.calls: list[str] = []

    def history(self, path):
        path = Path(path).as_posix()
        self.calls.append(path)
        if path not in self.histories:
            raise HistoryUnavailable(path)
        return list(self.histories[path])


class GitRepo:
    """Throwaway git repository with controllable commit dates."""

    def __init__(self, path: Path):
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("config", "user.name", "Fixture")
        self.git("config", "user.email", "fixture@example.com")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, env: dict[str, str] | None = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
            env={**os.environ, **(env or {})},
        )
        return result.stdout

    def write(self, relative_path: str, content: str) -> Path:
        file_path = self.path / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        return file_path

    def commit(
        self,
        message: str,
        date: str,
        author: str = "Ada Lovelace",
        email: str = "ada@example.com",
    ) -> None:
        self.git("add", "-A")
        self.git(
            "commit",
            "-q",
            "-m",
            message,
            env={
                "GIT_AUTHOR_NAME": author,
                "GIT_AUTHOR_EMAIL": email,
                "GIT_AUTHOR_DATE": date,
                "GIT_COMMITTER_DATE": date,
            },
        )


@pytest.fixture
def git_repo(tmp_path):
    """Empty git repository in a temporary directory."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitRepo(tmp_path / "repo")


@pytest.fixture
def atom_config(tmp_path):
    """Atom configuration rooted in a temporary directory."""
    return AtomConfig(
        base_url="https://example.com/book/",
        title="Test Book",
        authors=["Book Author"],
        root=str(tmp_path),
    )


@pytest.fixture
def run_started_at():
    """Pinned generation run start time."""
    return RUN_STARTED_AT


@pytest.fixture
def sample_book():
    """Book object as mdBook 0.4 sends it to preprocessors."""
    return {
        "sections": [
            {
                "Chapter": {
                    "name": "Introduction",
                    "content": "# Introduction\n\nWelcome.\n\n{{#recently_updated}}\n",
                    "number": [1],
                    "sub_items": [
                        {
                            "Chapter": {
                                "name": "Setup",
                                "content": "# Setup\n\nInstall things.\n",
                                "number": [1, 1],
                                "sub_items": [],
                                "path": "intro/setup.md",
                                "source_path": "intro/setup.md",
                                "parent_names": ["Introduction"],
                            }
                        }
                    ],
                    "path": "README.md",
                    "source_path": "README.md",
                    "parent_names": [],
                }
            },
            "Separator",
            {"PartTitle": "Reference"},
            {
                "Chapter": {
                    "name": "Draft",
                    "content": "",
                    "number": None,
                    "sub_items": [],
                    "path": None,
                    "source_path": None,
                    "parent_names": [],
                }
            },
            {
                "Chapter": {
                    "name": "API",
                    "content": "# API\n",
                    "number": [2],
                    "sub_items": [],
                    "path": "api.md",
                    "source_path": "api.md",
                    "parent_names": [],
                }
            },
        ],
        "__non_exhaustive": None,
    }


@pytest.fixture
def preprocessor_context(tmp_path):
    """Preprocessor context pointing at a temporary book root."""
    return {
        "root": str(tmp_path),
        "config": {
            "book": {
                "title": "Test Book",
                "authors": ["Book Author"],
                "src": "src",
            },
            "preprocessor": {
                "git-atom": {
                    "base_url": "https://example.com/book/",
                    "article_preview_lines": 2,
                },
                "git-updated": {"target_number_of_entries": 5},
            },
        },
        "renderer": "html",
        "mdbook_version": "0.4.40",
    }
