"""Tests for feed generation runs."""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from src.git_atom.config import AtomConfig
from src.git_atom.core import AtomFeedGenerator, run_preprocessor
from src.git_atom.exceptions import ConfigError, InvalidEntry
from src.git_atom.feed_assembler import ATOM_NAMESPACE
from src.shared_utilities import ContentFile, RepositoryError
from tests.conftest import FakeHistoryReader, make_commit

NS = {"atom": ATOM_NAMESPACE}

TEN_LINE_BODY = "".join(f"line {n}\n" for n in range(1, 11))


def content(path, title=None, body=None):
    return ContentFile(path=path, source_path=f"src/{path}", title=title, body=body)


@pytest.fixture
def history():
    return FakeHistoryReader(
        {
            "src/intro.md": [make_commit(1), make_commit(3)],
            "src/guide.md": [make_commit(2), make_commit(9)],
            "src/staged.md": [],
        }
    )


class TestAtomFeedGenerator:
    """Test AtomFeedGenerator with an in-memory history."""

    def test_build_entries(self, atom_config, history, run_started_at):
        """Test one entry per file, in input order."""
        generator = AtomFeedGenerator(atom_config, history)
        files = [content("intro.md", "Intro"), content("guide.md", "Guide")]

        entries = generator.build_entries(files, run_started_at)

        assert [e.title for e in entries] == ["Intro", "Guide"]
        assert history.calls == ["src/intro.md", "src/guide.md"]
        for e in entries:
            assert e.published <= e.updated

    def test_untracked_and_staged_files(self, atom_config, history, run_started_at):
        """Files without commits are dated at the run start."""
        generator = AtomFeedGenerator(atom_config, history)
        files = [content("untracked.md", "New"), content("staged.md", "Staged")]

        entries = generator.build_entries(files, run_started_at)

        for e in entries:
            assert e.published == run_started_at
            assert e.updated == run_started_at

    def test_preview_lines(self, tmp_path, history, run_started_at):
        """Test the configured preview budget is applied."""
        config = AtomConfig(
            base_url="https://example.com", article_preview_lines=3, root=str(tmp_path)
        )
        generator = AtomFeedGenerator(config, history)

        [entry] = generator.build_entries(
            [content("intro.md", "Intro", TEN_LINE_BODY)], run_started_at
        )

        assert entry.preview == "line 1\nline 2\nline 3"

    def test_no_preview_by_default(self, atom_config, history, run_started_at):
        """Test entries carry no content element by default."""
        generator = AtomFeedGenerator(atom_config, history)

        xml = generator.generate([content("intro.md", "Intro", TEN_LINE_BODY)], run_started_at)

        assert ET.fromstring(xml.encode("utf-8")).find("atom:entry/atom:content", NS) is None

    def test_generate_orders_entries(self, atom_config, history, run_started_at):
        """Test entries are ordered newest first."""
        generator = AtomFeedGenerator(atom_config, history)
        files = [
            content("intro.md", "Intro"),
            content("guide.md", "Guide"),
            content("untracked.md", "New"),
        ]

        root = ET.fromstring(generator.generate(files, run_started_at).encode("utf-8"))

        titles = [e.find("atom:title", NS).text for e in root.findall("atom:entry", NS)]
        assert titles == ["New", "Guide", "Intro"]
        assert root.find("atom:updated", NS).text == run_started_at.isoformat()

    def test_generate_is_idempotent(self, atom_config, history, run_started_at):
        """Test a pinned run start gives identical output."""
        generator = AtomFeedGenerator(atom_config, history)
        files = [content("intro.md", "Intro"), content("untracked.md", "New")]

        assert generator.generate(files, run_started_at) == generator.generate(
            files, run_started_at
        )

    def test_run_start_read_once(self, atom_config, history):
        """All files without history share one timestamp per run."""
        generator = AtomFeedGenerator(atom_config, history)
        files = [content("a.md", "A"), content("b.md", "B")]
        captured = []
        original = generator.build_entries

        def spy(content_files, run_started_at):
            entries = original(content_files, run_started_at)
            captured.extend(entries)
            return entries

        with patch.object(generator, "build_entries", side_effect=spy):
            generator.generate(files)

        assert captured[0].updated == captured[1].updated
        assert captured[0].updated.tzinfo is not None

    def test_empty_book(self, atom_config, history, run_started_at):
        """Test an empty book is dated at the run start."""
        root = ET.fromstring(
            AtomFeedGenerator(atom_config, history).generate([], run_started_at).encode("utf-8")
        )

        assert root.findall("atom:entry", NS) == []
        assert root.find("atom:updated", NS).text == run_started_at.isoformat()

    def test_repository_error_propagates(self, atom_config):
        """Test repository failures abort the run."""
        class BrokenReader(FakeHistoryReader):
            def history(self, path):
                raise RepositoryError("object store corrupted")

        generator = AtomFeedGenerator(atom_config, BrokenReader())

        with pytest.raises(RepositoryError):
            generator.generate([content("intro.md", "Intro")])

    def test_unusable_title_is_invalid_entry(self, atom_config, history, run_started_at):
        """A title that serializes to nothing fails before the feed is built."""
        generator = AtomFeedGenerator(atom_config, history)

        with pytest.raises(InvalidEntry) as exc_info:
            generator.generate([content("\x02.md", "\x01")], run_started_at)

        assert exc_info.value.path == "\x02.md"

    def test_default_reader_requires_repository(self, tmp_path):
        """Test the default reader needs a repository."""
        config = AtomConfig(base_url="https://example.com", root=str(tmp_path / "missing"))

        with pytest.raises(RepositoryError):
            AtomFeedGenerator(config)

    def test_write(self, atom_config, history, run_started_at):
        """Test the feed is written to the book source directory."""
        generator = AtomFeedGenerator(atom_config, history)

        path = generator.write(generator.generate([], run_started_at))

        assert path == atom_config.feed_path
        assert path.read_text(encoding="utf-8").startswith("<?xml")

    def test_run_leaves_book_unchanged(self, atom_config, history, sample_book):
        """Test the book is handed back untouched."""
        generator = AtomFeedGenerator(atom_config, history)
        before = repr(sample_book)

        assert generator.run(sample_book) is sample_book
        assert repr(sample_book) == before
        assert atom_config.feed_path.exists()
        assert history.calls == ["src/README.md", "src/intro/setup.md", "src/api.md"]


class TestRunPreprocessor:
    """End to end against a real repository."""

    def test_feed_from_git_history(self, git_repo, preprocessor_context, sample_book):
        """Test a feed built from real commits."""
        git_repo.write("src/README.md", "# Introduction\n")
        git_repo.write("src/api.md", "# API\n")
        git_repo.commit("Start book", "2024-01-01T10:00:00+00:00")
        git_repo.write("src/intro/setup.md", "# Setup\n")
        git_repo.commit("Add setup", "2024-01-05T10:00:00+00:00")
        git_repo.write("src/api.md", "# API\n\nEndpoints.\n")
        git_repo.commit("Document endpoints", "2024-01-09T10:00:00+00:00")
        preprocessor_context["root"] = str(git_repo.path)

        book = run_preprocessor(preprocessor_context, sample_book)

        assert book is sample_book
        feed = (git_repo.path / "src" / "atom.xml").read_text(encoding="utf-8")
        root = ET.fromstring(feed.encode("utf-8"))
        entries = root.findall("atom:entry", NS)
        assert [e.find("atom:title", NS).text for e in entries] == [
            "API",
            "Setup",
            "Introduction",
        ]
        api = entries[0]
        assert api.find("atom:published", NS).text == "2024-01-01T10:00:00+00:00"
        assert api.find("atom:updated", NS).text == "2024-01-09T10:00:00+00:00"
        assert api.find("atom:link", NS).get("href") == "https://example.com/book/api.html"
        assert entries[2].find("atom:link", NS).get("href") == (
            "https://example.com/book/index.html"
        )
        # Chapters shorter than the preview budget are included whole
        assert api.find("atom:content", NS).text == "# API\n"
        assert root.find("atom:updated", NS).text == "2024-01-09T10:00:00+00:00"

    def test_invalid_config(self, preprocessor_context, sample_book):
        """Test a config error aborts before touching git."""
        preprocessor_context["config"]["preprocessor"]["git-atom"]["base_url"] = ""

        with pytest.raises(ConfigError):
            run_preprocessor(preprocessor_context, sample_book)

    def test_not_a_repository(self, tmp_path, preprocessor_context, sample_book):
        """Test a book outside git fails with RepositoryError."""
        book_root = tmp_path / "book"
        book_root.mkdir()
        preprocessor_context["root"] = str(book_root)

        with patch.dict("os.environ", {"GIT_CEILING_DIRECTORIES": str(tmp_path)}):
            with pytest.raises(RepositoryError):
                run_preprocessor(preprocessor_context, sample_book)


def test_published_not_after_updated(atom_config, run_started_at):
    """Holds for every entry whatever order history arrives in."""
    reader = FakeHistoryReader(
        {f"src/{n}.md": [make_commit(d) for d in (n, 28 - n, 14)] for n in range(1, 10)}
    )
    generator = AtomFeedGenerator(atom_config, reader)

    entries = generator.build_entries(
        [content(f"{n}.md", str(n)) for n in range(1, 11)], run_started_at
    )

    assert all(e.published <= e.updated for e in entries)
    assert datetime(2024, 1, 1, tzinfo=timezone.utc) < entries[0].updated
