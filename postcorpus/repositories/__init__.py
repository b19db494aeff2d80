"""Data access repositories."""

from .base import BaseRepository, translate_storage_errors
from .post_repository import PostRepository
from .version_repository import VersionRepository, compute_content_hash
from .category_repository import CategoryRepository

__all__ = [
    "BaseRepository",
    "translate_storage_errors",
    "PostRepository",
    "VersionRepository",
    "compute_content_hash",
    "CategoryRepository",
]
