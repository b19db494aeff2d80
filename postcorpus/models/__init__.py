"""Database models."""

from .post import Post, PostTag
from .category import Category, ROOT_CATEGORY
from .version import ContentBlob, VersionRecord

__all__ = [
    "Post", "PostTag",
    "Category", "ROOT_CATEGORY",
    "ContentBlob", "VersionRecord",
]
