"""Business logic services."""

from .category_service import CategoryService, build_category_tree, expand_category
from .post_service import PostService, corpus_path
from .publishing import PostStatus, post_status, status_filter

__all__ = [
    "CategoryService",
    "build_category_tree",
    "expand_category",
    "PostService",
    "corpus_path",
    "PostStatus",
    "post_status",
    "status_filter",
]
