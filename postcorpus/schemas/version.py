"""Version schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from .post import PostContent


class VersionInfo(BaseModel):
    """Lineage node summary as returned by the version store."""
    hash: str
    parent_hash: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PostVersion(PostContent):
    """Content of a post at a specific version hash."""
    hash: str
    uuid: str
