"""
Recently updated chapter lists for mdBook books.
"""

from .config import UpdatedConfig
from .core import RecentlyUpdatedProcessor, UpdatedPage, run_preprocessor

__all__ = [
    "RecentlyUpdatedProcessor",
    "UpdatedConfig",
    "UpdatedPage",
    "run_preprocessor",
]
