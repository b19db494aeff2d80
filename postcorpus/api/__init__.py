"""API routes."""

from .posts import router as posts_router
from .versions import router as versions_router
from .categories import router as categories_router
from .tags import router as tags_router
from .tags import post_tags_router

__all__ = [
    "posts_router",
    "versions_router",
    "categories_router",
    "tags_router",
    "post_tags_router",
]
