"""Pydantic schemas for validation and responses."""

from .post import (
    PostContent,
    PostCreate,
    PostUpdate,
    PostListParams,
    PostResponse,
    PostsResponse,
    PostTags,
    TagCount,
)
from .version import VersionInfo, PostVersion
from .category import CategoryCreate, CategoryUpdate, CategoryResponse, CategoryNode

__all__ = [
    "PostContent",
    "PostCreate",
    "PostUpdate",
    "PostListParams",
    "PostResponse",
    "PostsResponse",
    "PostTags",
    "TagCount",
    "VersionInfo",
    "PostVersion",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryNode",
]
