"""Post schemas."""

import re
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List, Literal

from ..core.clock import as_utc

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Supported content formats; the format field tags which variant a payload is.
ContentFormat = Literal["md", "adoc"]

# Fields stored in the version store. Everything else is metadata.
CONTENT_FIELDS = ("title", "content", "description", "format")

PostStatusFilter = Literal["published", "scheduled", "draft", "all"]
PostSort = Literal["created", "updated", "published"]


def _validate_slug(v: str) -> str:
    if not SLUG_PATTERN.match(v):
        raise ValueError("Slug must be lowercase alphanumeric with hyphens")
    return v


def _normalize_tags(tags: List[str]) -> List[str]:
    """Strip, drop blanks and collapse duplicates (first occurrence wins)."""
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class PostContent(BaseModel):
    """The immutable part of a post, stored as one version payload."""
    title: str = Field(..., min_length=1)
    content: str
    description: Optional[str] = None
    format: ContentFormat = "md"

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v


class PostCreate(BaseModel):
    """Schema for creating a post."""
    slug: str
    title: str = Field(..., min_length=1)
    content: str
    description: Optional[str] = None
    format: ContentFormat = "md"
    category: Optional[str] = None  # None = default category
    tags: List[str] = []
    publish_at: Optional[datetime] = None
    project_id: Optional[str] = None

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return _validate_slug(v)

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return _normalize_tags(v)

    @field_validator('publish_at')
    @classmethod
    def normalize_publish_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def content_fields(self) -> dict:
        return {field: getattr(self, field) for field in CONTENT_FIELDS}

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slug": "hello-world",
                    "title": "Hello World",
                    "content": "# Hello\n\nFirst post.",
                    "format": "md",
                    "category": "coding",
                    "tags": ["intro"],
                    "publish_at": None,
                }
            ]
        }
    }


class PostUpdate(BaseModel):
    """Schema for a partial post update.

    Only fields that were explicitly provided are applied, so an absent
    ``tags`` leaves tags alone while ``tags: []`` clears them, and an
    explicit ``publish_at: null`` turns the post back into a draft.
    """
    slug: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    description: Optional[str] = None
    format: Optional[ContentFormat] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    archived: Optional[bool] = None
    publish_at: Optional[datetime] = None
    project_id: Optional[str] = None

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v: Optional[str]) -> Optional[str]:
        return _validate_slug(v) if v is not None else v

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _normalize_tags(v) if v is not None else v

    @field_validator('publish_at')
    @classmethod
    def normalize_publish_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def provided(self) -> dict:
        """Fields the caller actually sent, with their values."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def content_changes(self) -> dict:
        return {k: v for k, v in self.provided().items() if k in CONTENT_FIELDS}

    def metadata_changes(self) -> dict:
        return {k: v for k, v in self.provided().items() if k not in CONTENT_FIELDS}


class PostListParams(BaseModel):
    """Filters, sort and pagination for listing posts. Filters AND together."""
    category: Optional[str] = None  # includes descendant categories
    tag: Optional[str] = None
    project: Optional[str] = None
    status: PostStatusFilter = "all"
    archived: bool = False  # True = include archived posts
    limit: int = Field(10, ge=1, le=100)
    offset: int = Field(0, ge=0)
    sort: PostSort = "updated"


class PostResponse(BaseModel):
    """Assembled post: metadata joined with the content at the current version."""
    id: int
    uuid: str
    author_id: str
    slug: str
    title: str
    content: str
    description: Optional[str] = None
    format: ContentFormat
    category: str
    tags: List[str] = []
    archived: bool
    publish_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    project_id: Optional[str] = None
    corpus_version: str
    status: Literal["draft", "scheduled", "published"]


class PostsResponse(BaseModel):
    """One page of posts plus totals computed from the same filter."""
    posts: List[PostResponse]
    total_posts: int
    total_pages: int
    per_page: int
    current_page: int


class TagCount(BaseModel):
    """A tag label and how many of the owner's posts carry it."""
    tag: str
    count: int


class PostTags(BaseModel):
    """A single post's tag set, as sent to and returned by the per-post tag routes."""
    tags: List[str]

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return _normalize_tags(v)
