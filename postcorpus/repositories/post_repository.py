"""Post metadata repository.

Owns every query against the ``posts`` and ``post_tags`` tables. Content is
never read or written here; rows only carry the current version hash.
Ownership is part of every owner-scoped query, never assumed.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

import sqlalchemy.exc
from sqlalchemy import and_, func, update, exists
from sqlalchemy.orm import Query

from ..exceptions import (
    OwnershipConflictError,
    PostNotFoundError,
    SlugConflictError,
    TagNotFoundError,
    ValidationError,
)
from ..models import Post, PostTag
from ..schemas.post import PostListParams, TagCount
from .base import BaseRepository, translate_storage_errors

# Metadata columns a partial update may touch.
UPDATABLE_FIELDS = frozenset({"slug", "category", "archived", "publish_at", "project_id"})

_SORT_COLUMNS = {
    "created": Post.created_at,
    "updated": Post.updated_at,
    "published": Post.publish_at,
}


def _slug_conflict(slug: str):
    def _translate(error: sqlalchemy.exc.IntegrityError):
        return SlugConflictError(slug)
    return _translate


class PostRepository(BaseRepository[Post]):
    """Repository for post metadata CRUD operations."""

    model_class = Post
    id_column = "uuid"

    def create(
        self,
        *,
        uuid: str,
        author_id: str,
        slug: str,
        corpus_version: str,
        category: str,
        publish_at: Optional[datetime],
        project_id: Optional[str],
        now: datetime,
    ) -> Post:
        """Insert a new metadata row. Raises SlugConflictError on duplicate slug."""
        db_post = Post(
            uuid=uuid,
            author_id=author_id,
            slug=slug,
            corpus_version=corpus_version,
            category=category,
            archived=False,
            publish_at=publish_at,
            project_id=project_id,
            created_at=now,
            updated_at=now,
        )
        with translate_storage_errors("post create", on_integrity_error=_slug_conflict(slug)):
            self.db.add(db_post)
            self.db.flush()
            self.db.refresh(db_post)
        return db_post

    # get_by_id_optional is inherited and looks up by uuid
    # without an owner; use them only to tell "missing" from "not yours".

    def get_owned(self, owner_id: str, uuid: str) -> Post:
        """Get a post by uuid that belongs to owner_id. Raises PostNotFoundError."""
        with translate_storage_errors("post lookup"):
            post = self.db.query(Post).filter(
                Post.author_id == owner_id, Post.uuid == uuid
            ).first()
        if post is None:
            raise PostNotFoundError(uuid)
        return post

    def get_by_slug(self, owner_id: str, slug: str) -> Optional[Post]:
        with translate_storage_errors("post lookup"):
            return self.db.query(Post).filter(
                Post.author_id == owner_id, Post.slug == slug
            ).first()

    def slug_exists(self, owner_id: str, slug: str, exclude_uuid: Optional[str] = None) -> bool:
        with translate_storage_errors("slug check"):
            query = self.db.query(Post.id).filter(Post.author_id == owner_id, Post.slug == slug)
            if exclude_uuid is not None:
                query = query.filter(Post.uuid != exclude_uuid)
            return query.first() is not None

    def update_fields(self, post: Post, fields: dict, now: datetime) -> Post:
        """Apply metadata field changes and bump updated_at."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Not updatable: {sorted(unknown)}", field=sorted(unknown)[0])

        with translate_storage_errors("post update", on_integrity_error=_slug_conflict(fields.get("slug", post.slug))):
            for name, value in fields.items():
                setattr(post, name, value)
            post.updated_at = now
            self.db.flush()
        return post

    def upsert_current_version(self, uuid: str, owner_id: str, new_hash: str, now: datetime) -> None:
        """Atomically point the post at new_hash and bump updated_at.

        A single conditional UPDATE; concurrent swaps serialize on the row and
        the last one to commit wins.

        Raises:
            OwnershipConflictError: the post belongs to another owner.
            PostNotFoundError: no post with this uuid.
        """
        with translate_storage_errors("version pointer swap"):
            result = self.db.execute(
                update(Post)
                .where(Post.uuid == uuid, Post.author_id == owner_id)
                .values(corpus_version=new_hash, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if self.get_by_id_optional(uuid) is None:
                    raise PostNotFoundError(uuid)
                raise OwnershipConflictError(uuid, owner_id)
            self.db.expire_all()

    def delete(self, post: Post) -> None:
        """Hard delete a metadata row; tag rows cascade."""
        with translate_storage_errors("post delete"):
            self.db.delete(post)
            self.db.flush()

    # --- Tags ---

    def set_tags(self, post: Post, tags: Iterable[str]) -> List[str]:
        """Replace the post's tag set with *tags*."""
        wanted = list(dict.fromkeys(tags))
        with translate_storage_errors("tag sync"):
            self.db.query(PostTag).filter(PostTag.post_id == post.id).delete(synchronize_session="fetch")
            for tag in wanted:
                self.db.add(PostTag(post_id=post.id, tag=tag))
            self.db.flush()
            self.db.expire(post, ["tags"])
        return wanted

    def add_tags(self, post: Post, tags: Iterable[str]) -> List[str]:
        """Merge *tags* into the post's tag set; returns the full sorted set."""
        current = set(self.get_tags_for([post.id]).get(post.id, []))
        with translate_storage_errors("tag add"):
            for tag in dict.fromkeys(tags):
                if tag not in current:
                    self.db.add(PostTag(post_id=post.id, tag=tag))
                    current.add(tag)
            self.db.flush()
            self.db.expire(post, ["tags"])
        return sorted(current)

    def remove_tag(self, post: Post, tag: str) -> None:
        """Remove one tag. Raises TagNotFoundError if the post lacks it."""
        with translate_storage_errors("tag remove"):
            removed = self.db.query(PostTag).filter(
                PostTag.post_id == post.id, PostTag.tag == tag
            ).delete(synchronize_session="fetch")
            self.db.flush()
            self.db.expire(post, ["tags"])
        if removed == 0:
            raise TagNotFoundError(post.uuid, tag)

    def get_tags_for(self, post_ids: List[int]) -> Dict[int, List[str]]:
        """Tags keyed by post id, each list sorted."""
        if not post_ids:
            return {}
        with translate_storage_errors("tag lookup"):
            rows = self.db.query(PostTag.post_id, PostTag.tag).filter(
                PostTag.post_id.in_(post_ids)
            ).order_by(PostTag.tag).all()
        result: Dict[int, List[str]] = {}
        for post_id, tag in rows:
            result.setdefault(post_id, []).append(tag)
        return result

    def list_tags(self, owner_id: str) -> List[TagCount]:
        """Every tag the owner uses, with post counts, most used first."""
        with translate_storage_errors("tag list"):
            rows = (
                self.db.query(PostTag.tag, func.count(PostTag.post_id))
                .join(Post, Post.id == PostTag.post_id)
                .filter(Post.author_id == owner_id)
                .group_by(PostTag.tag)
                .order_by(func.count(PostTag.post_id).desc(), PostTag.tag)
                .all()
            )
        return [TagCount(tag=tag, count=count) for tag, count in rows]

    # --- Listing ---

    def _filtered_query(self, owner_id: str, params: PostListParams, categories: Optional[set], status_clause) -> Query:
        """One predicate shared by the page query and the count query."""
        query = self.db.query(Post).filter(Post.author_id == owner_id, status_clause)
        if not params.archived:
            query = query.filter(Post.archived.is_(False))
        if categories is not None:
            query = query.filter(Post.category.in_(sorted(categories)))
        if params.tag:
            query = query.filter(
                exists().where(and_(PostTag.post_id == Post.id, PostTag.tag == params.tag))
            )
        if params.project:
            query = query.filter(Post.project_id == params.project)
        return query

    def list_page(self, owner_id: str, params: PostListParams, categories: Optional[set], status_clause) -> tuple[List[Post], int]:
        """Return (rows for the requested page, total matching rows)."""
        sort_column = _SORT_COLUMNS[params.sort]
        with translate_storage_errors("post list"):
            query = self._filtered_query(owner_id, params, categories, status_clause)
            total = query.order_by(None).count()
            rows = (
                query.order_by(sort_column.is_(None), sort_column.desc(), Post.id.desc())
                .offset(params.offset)
                .limit(params.limit)
                .all()
            )
        return rows, total

    def count_in_category(self, owner_id: str, category: str) -> int:
        with translate_storage_errors("post count"):
            return self.db.query(Post.id).filter(
                Post.author_id == owner_id, Post.category == category
            ).count()

    def recategorize(self, owner_id: str, old: str, new: str) -> int:
        """Move every post of the owner from category *old* to *new*."""
        with translate_storage_errors("post recategorize"):
            return self.db.query(Post).filter(
                Post.author_id == owner_id, Post.category == old
            ).update({Post.category: new}, synchronize_session=False)
