"""Publish-state evaluation.

A post has no stored state machine. Its state is derived on every read from
``publish_at`` and a caller-supplied ``now``:

    publish_at is None   -> draft
    publish_at <= now    -> published  (a tie counts as published)
    publish_at >  now    -> scheduled

``status_filter`` expresses the same rules as SQL predicates so list
filtering agrees with the evaluator.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import and_, true

from ..core.clock import as_utc
from ..models import Post


class PostStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


def is_draft(publish_at: Optional[datetime], now: datetime) -> bool:
    return publish_at is None


def is_published(publish_at: Optional[datetime], now: datetime) -> bool:
    return publish_at is not None and as_utc(publish_at) <= as_utc(now)


def is_scheduled(publish_at: Optional[datetime], now: datetime) -> bool:
    return publish_at is not None and as_utc(publish_at) > as_utc(now)


def post_status(publish_at: Optional[datetime], now: datetime) -> PostStatus:
    if is_draft(publish_at, now):
        return PostStatus.DRAFT
    if is_scheduled(publish_at, now):
        return PostStatus.SCHEDULED
    return PostStatus.PUBLISHED


def status_filter(status: str, now: datetime):
    """SQL predicate on ``Post.publish_at`` for a list status filter.

    ``"all"`` matches everything.
    """
    now = as_utc(now)
    if status == PostStatus.DRAFT.value:
        return Post.publish_at.is_(None)
    if status == PostStatus.PUBLISHED.value:
        return and_(Post.publish_at.isnot(None), Post.publish_at <= now)
    if status == PostStatus.SCHEDULED.value:
        return and_(Post.publish_at.isnot(None), Post.publish_at > now)
    if status == "all":
        return true()
    raise ValueError(f"Unknown status filter: {status}")
