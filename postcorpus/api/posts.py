"""Post API endpoints.

Endpoints are thin; PostService handles the full lifecycle (content versions,
metadata, tags) as a deep module.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..core.auth import get_clock, require_owner
from ..core.clock import Clock
from ..database import get_db
from ..schemas.post import (
    PostCreate,
    PostListParams,
    PostResponse,
    PostSort,
    PostStatusFilter,
    PostsResponse,
    PostUpdate,
)
from ..schemas.version import VersionInfo
from ..services import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=201)
def create_post(
    post: PostCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Create a post and its first version."""
    return PostService(db, clock).create(owner_id, post)


@router.get("", response_model=PostsResponse)
def list_posts(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    project: Optional[str] = None,
    status: PostStatusFilter = "all",
    archived: bool = False,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    sort: PostSort = "updated",
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """List the owner's posts. Filters combine with AND; category includes descendants."""
    params = PostListParams(
        category=category,
        tag=tag,
        project=project,
        status=status,
        archived=archived,
        limit=limit,
        offset=offset,
        sort=sort,
    )
    return PostService(db, clock).list(owner_id, params)


@router.get("/{ref}", response_model=PostResponse)
def get_post(
    ref: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Get a post by uuid or slug."""
    return PostService(db, clock).get(owner_id, ref)


@router.put("/{post_uuid}", response_model=PostResponse)
def update_post(
    post_uuid: str,
    update: PostUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Partially update a post. Only fields present in the body change."""
    return PostService(db, clock).update(owner_id, post_uuid, update)


@router.delete("/{post_uuid}", status_code=204)
def delete_post(
    post_uuid: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Delete a post's metadata. Its versions stay in the store."""
    PostService(db).delete(owner_id, post_uuid)
    return Response(status_code=204)


@router.get("/{post_uuid}/lineage", response_model=List[VersionInfo])
def get_lineage(
    post_uuid: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Parent chain from the current version back to the first one."""
    return PostService(db).lineage(owner_id, post_uuid)
