"""
Common utilities shared across the preprocessors
"""

from .book import (
    BookFormatError,
    ContentFile,
    collect_content_files,
    for_each_chapter,
    iter_chapters,
    parse_preprocessor_input,
    write_book,
)
from .exceptions import ConfigError, PreprocessorError
from .git_history import (
    CommitInfo,
    GitHistoryError,
    GitHistoryReader,
    HistoryReader,
    HistoryUnavailable,
    RepositoryError,
)
from .logging_config import configure_logging, get_logger, get_logging_manager
from .preprocessor import handle_preprocessing, supports_renderer
from .telemetry import trace_function

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "trace_function",
    "BookFormatError",
    "ConfigError",
    "PreprocessorError",
    "ContentFile",
    "collect_content_files",
    "for_each_chapter",
    "iter_chapters",
    "parse_preprocessor_input",
    "write_book",
    "CommitInfo",
    "GitHistoryError",
    "GitHistoryReader",
    "HistoryReader",
    "HistoryUnavailable",
    "RepositoryError",
    "handle_preprocessing",
    "supports_renderer",
]
