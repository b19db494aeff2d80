"""Tag API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..core.auth import get_clock, require_owner
from ..core.clock import Clock
from ..database import get_db
from ..schemas.post import PostTags, TagCount
from ..services import PostService

router = APIRouter(prefix="/api/tags", tags=["tags"])
post_tags_router = APIRouter(prefix="/api/posts/{post_uuid}/tags", tags=["tags"])


@router.get("", response_model=List[TagCount])
def list_tags(
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Every tag the owner uses, most used first."""
    return PostService(db).list_tags(owner_id)


@post_tags_router.get("", response_model=PostTags)
def get_post_tags(
    post_uuid: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    return PostTags(tags=PostService(db).get_post_tags(owner_id, post_uuid))


@post_tags_router.put("", response_model=PostTags)
def set_post_tags(
    post_uuid: str,
    body: PostTags,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Replace the post's tag set."""
    return PostTags(tags=PostService(db, clock).set_post_tags(owner_id, post_uuid, body.tags))


@post_tags_router.post("", response_model=PostTags, status_code=201)
def add_post_tags(
    post_uuid: str,
    body: PostTags,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Add tags to the post, keeping the ones it already has."""
    return PostTags(tags=PostService(db, clock).add_tags(owner_id, post_uuid, body.tags))


@post_tags_router.delete("/{tag}", status_code=204)
def remove_post_tag(
    post_uuid: str,
    tag: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
    clock: Clock = Depends(get_clock),
):
    """Remove one tag. 404 if the post does not carry it."""
    PostService(db, clock).remove_tag(owner_id, post_uuid, tag)
    return Response(status_code=204)
