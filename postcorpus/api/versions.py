"""Version API endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import get_clock, require_owner
from ..core.clock import Clock
from ..database import get_db
from ..schemas.post import PostResponse
from ..schemas.version import PostVersion, VersionInfo
from ..services import PostService

router = APIRouter(prefix="/api/posts/{post_uuid}/versions", tags=["versions"])


@router.get("", response_model=List[VersionInfo])
def list_versions(
    post_uuid: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """List all versions of a post, newest first."""
    return PostService(db).list_versions(owner_id, post_uuid)


@router.get("/{content_hash}", response_model=PostVersion)
def get_version(
    post_uuid: str,
    content_hash: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Get a post's content at a specific version."""
    return PostService(db).get_version(owner_id, post_uuid, content_hash)


@router.post("/{content_hash}/restore", response_model=PostResponse)
def restore_version(
    post_uuid: str,
    content_hash: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Make an earlier version current again. History is extended, never rewritten."""
    return PostService(db, clock).restore(owner_id, post_uuid, content_hash)
