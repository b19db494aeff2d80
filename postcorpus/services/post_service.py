"""Post service - deep module for the post lifecycle.

Joins two stores: post content lives in the content-addressed version store
under ``posts/{owner_id}/{uuid}``, routing and identity data lives in the
``posts`` table. Callers only see assembled posts.

Write ordering: a new version is written and committed before the metadata
row is pointed at it. A crash in between leaves an orphaned version and a
post still pointing at its previous, valid version.
"""

import logging
import math
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, as_utc, utc_now
from ..core.config import settings
from ..exceptions import (
    CorruptContentError,
    PostNotFoundError,
    SlugConflictError,
    ValidationError,
    VersionNotFoundError,
)
from ..models import Post
from ..repositories import PostRepository, VersionRepository, translate_storage_errors
from ..schemas.post import (
    PostContent,
    PostCreate,
    PostListParams,
    PostResponse,
    PostsResponse,
    PostUpdate,
    TagCount,
)
from ..schemas.version import PostVersion, VersionInfo
from .category_service import CategoryService
from .content_utils import deserialize_content, serialize_content, validate_content
from .publishing import post_status, status_filter

logger = logging.getLogger(__name__)


def corpus_path(owner_id: str, post_uuid: str) -> str:
    """Version store namespace for a post. Never derived from slug or category."""
    return f"posts/{owner_id}/{post_uuid}"


class PostService:
    """Deep module for post operations.

    Every public method takes the owning identity first and checks existence
    and ownership before writing anything.
    """

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.post_repo = PostRepository(db)
        self.version_repo = VersionRepository(db, clock)
        self.category_service = CategoryService(db)

    # --- Writes ---

    def create(self, owner_id: str, data: PostCreate) -> PostResponse:
        """Create a post: first version, metadata row, tags.

        Raises:
            ValidationError: invalid content fields.
            SlugConflictError: slug already used by this owner.
        """
        content = validate_content(data.content_fields())
        if self.post_repo.slug_exists(owner_id, data.slug):
            raise SlugConflictError(data.slug)

        post_uuid = str(uuid.uuid4())
        path = corpus_path(owner_id, post_uuid)
        content_hash = self.version_repo.put(path, serialize_content(content))
        self._commit("version write")

        now = as_utc(self.clock())
        post = self.post_repo.create(
            uuid=post_uuid,
            author_id=owner_id,
            slug=data.slug,
            corpus_version=content_hash,
            category=data.category or settings.default_category,
            publish_at=data.publish_at,
            project_id=data.project_id,
            now=now,
        )
        tags = self.post_repo.set_tags(post, data.tags)
        self._commit("post create")

        logger.info(
            "Created post",
            extra={"owner_id": owner_id, "post_uuid": post_uuid, "slug": data.slug, "hash": content_hash},
        )
        return self._assemble(post, content, tags, now)

    def update(self, owner_id: str, post_uuid: str, data: PostUpdate) -> PostResponse:
        """Apply a partial update.

        Content fields merge over the current version; a new version is only
        written when the merged content differs. Metadata-only updates never
        add history. Absent fields (including ``tags``) stay as they are.

        Raises:
            PostNotFoundError: unknown uuid or not owned by owner_id.
            SlugConflictError: new slug already used by this owner.
            ValidationError: invalid field values.
        """
        post = self.post_repo.get_owned(owner_id, post_uuid)
        path = corpus_path(owner_id, post_uuid)

        metadata = data.metadata_changes()
        tags_given = "tags" in metadata
        new_tags = metadata.pop("tags", None) or []
        self._check_metadata(owner_id, post, metadata)

        current_hash = post.corpus_version
        content = self._load_content(path, current_hash)

        new_hash = None
        content_changes = data.content_changes()
        if content_changes:
            merged = validate_content({**content.model_dump(), **content_changes})
            if merged != content:
                new_hash = self.version_repo.put(path, serialize_content(merged), parent_hash=current_hash)
                self._commit("version write")
                content = merged

        if not (metadata or tags_given or new_hash):
            return self._assemble_from_row(post, content)

        now = as_utc(self.clock())
        self.post_repo.update_fields(post, metadata, now)
        if tags_given:
            self.post_repo.set_tags(post, new_tags)
        if new_hash is not None and new_hash != current_hash:
            # Pointer swap goes last.
            self.post_repo.upsert_current_version(post_uuid, owner_id, new_hash, now)
        self._commit("post update")

        logger.info(
            "Updated post",
            extra={
                "owner_id": owner_id,
                "post_uuid": post_uuid,
                "fields": sorted(data.model_fields_set),
                "hash": new_hash or current_hash,
            },
        )
        return self._assemble_from_row(post, content)

    def delete(self, owner_id: str, post_uuid: str) -> None:
        """Hard-delete the metadata row and its tags.

        Version records stay in the store; reclaiming them is left to a
        separate retention process.
        """
        post = self.post_repo.get_owned(owner_id, post_uuid)
        self.post_repo.delete(post)
        self._commit("post delete")
        logger.info("Deleted post", extra={"owner_id": owner_id, "post_uuid": post_uuid})

    def restore(self, owner_id: str, post_uuid: str, target_hash: str) -> PostResponse:
        """Make an earlier version current again by appending it as a new head.

        The new node's parent is the current head, never *target_hash*, so
        history is only ever extended. Restoring the current head is a no-op.

        Raises:
            PostNotFoundError: unknown uuid or not owned by owner_id.
            VersionNotFoundError: target_hash is not a version of this post.
            CorruptContentError: stored payload fails verification.
        """
        post = self.post_repo.get_owned(owner_id, post_uuid)
        path = corpus_path(owner_id, post_uuid)

        payload = self.version_repo.get(path, target_hash)
        content = deserialize_content(payload, path, target_hash)
        current_hash = post.corpus_version
        if target_hash == current_hash:
            return self._assemble_from_row(post, content)

        new_hash = self.version_repo.put(path, payload, parent_hash=current_hash)
        self._commit("version write")

        now = as_utc(self.clock())
        self.post_repo.upsert_current_version(post_uuid, owner_id, new_hash, now)
        self._commit("version restore")

        logger.info(
            "Restored post version",
            extra={"owner_id": owner_id, "post_uuid": post_uuid, "hash": new_hash, "parent_hash": current_hash},
        )
        return self._assemble_from_row(post, content)

    # --- Reads ---

    def get(self, owner_id: str, ref: str) -> PostResponse:
        """Get a post by uuid, falling back to slug."""
        post = self._find(owner_id, ref)
        path = corpus_path(owner_id, post.uuid)
        return self._assemble_from_row(post, self._load_content(path, post.corpus_version))

    def list(self, owner_id: str, params: PostListParams, now: Optional[datetime] = None) -> PostsResponse:
        """List posts matching every filter in *params*.

        Status is evaluated against *now* (defaults to the service clock).
        The total comes from the same predicate as the page.
        """
        now = as_utc(now or self.clock())
        categories = None
        if params.category:
            categories = self.category_service.expand(owner_id, params.category)

        rows, total = self.post_repo.list_page(owner_id, params, categories, status_filter(params.status, now))
        tags_by_post = self.post_repo.get_tags_for([row.id for row in rows])

        posts = [
            self._assemble(
                row,
                self._load_content(corpus_path(owner_id, row.uuid), row.corpus_version),
                tags_by_post.get(row.id, []),
                now,
            )
            for row in rows
        ]
        return PostsResponse(
            posts=posts,
            total_posts=total,
            total_pages=math.ceil(total / params.limit),
            per_page=params.limit,
            current_page=params.offset // params.limit + 1,
        )

    def list_versions(self, owner_id: str, post_uuid: str) -> List[VersionInfo]:
        """Every version of the post, newest first."""
        self.post_repo.get_owned(owner_id, post_uuid)
        return self.version_repo.list_versions(corpus_path(owner_id, post_uuid))

    def lineage(self, owner_id: str, post_uuid: str) -> List[VersionInfo]:
        """Parent chain from the current version back to the first one."""
        post = self.post_repo.get_owned(owner_id, post_uuid)
        return self.version_repo.lineage(corpus_path(owner_id, post_uuid), post.corpus_version)

    def get_version(self, owner_id: str, post_uuid: str, content_hash: str) -> PostVersion:
        """Content of the post at *content_hash*."""
        self.post_repo.get_owned(owner_id, post_uuid)
        path = corpus_path(owner_id, post_uuid)
        content = deserialize_content(self.version_repo.get(path, content_hash), path, content_hash)
        return PostVersion(**content.model_dump(), hash=content_hash, uuid=post_uuid)

    def list_tags(self, owner_id: str) -> List[TagCount]:
        return self.post_repo.list_tags(owner_id)

    # --- Per-post tags ---
    # Tags are metadata: these bump updated_at but never write a version.

    def get_post_tags(self, owner_id: str, post_uuid: str) -> List[str]:
        post = self.post_repo.get_owned(owner_id, post_uuid)
        return self.post_repo.get_tags_for([post.id]).get(post.id, [])

    def set_post_tags(self, owner_id: str, post_uuid: str, tags: List[str]) -> List[str]:
        """Replace the post's tags with *tags*."""
        post = self.post_repo.get_owned(owner_id, post_uuid)
        result = sorted(self.post_repo.set_tags(post, tags))
        self.post_repo.update_fields(post, {}, as_utc(self.clock()))
        self._commit("tag sync")
        logger.info("Replaced post tags", extra={"owner_id": owner_id, "post_uuid": post_uuid, "tags": result})
        return result

    def add_tags(self, owner_id: str, post_uuid: str, tags: List[str]) -> List[str]:
        """Merge *tags* into the post's existing tags."""
        post = self.post_repo.get_owned(owner_id, post_uuid)
        result = self.post_repo.add_tags(post, tags)
        self.post_repo.update_fields(post, {}, as_utc(self.clock()))
        self._commit("tag add")
        logger.info("Added post tags", extra={"owner_id": owner_id, "post_uuid": post_uuid, "tags": result})
        return result

    def remove_tag(self, owner_id: str, post_uuid: str, tag: str) -> None:
        """Raises TagNotFoundError when the post does not carry *tag*."""
        post = self.post_repo.get_owned(owner_id, post_uuid)
        self.post_repo.remove_tag(post, tag)
        self.post_repo.update_fields(post, {}, as_utc(self.clock()))
        self._commit("tag remove")
        logger.info("Removed post tag", extra={"owner_id": owner_id, "post_uuid": post_uuid, "tag": tag})

    # --- Internals ---

    def _find(self, owner_id: str, ref: str) -> Post:
        post = self.post_repo.get_by_id_optional(ref)
        if post is not None and post.author_id == owner_id:
            return post
        post = self.post_repo.get_by_slug(owner_id, ref)
        if post is None:
            raise PostNotFoundError(ref)
        return post

    def _check_metadata(self, owner_id: str, post: Post, metadata: dict) -> None:
        """Reject invalid metadata changes before anything is written."""
        if "slug" in metadata:
            slug = metadata["slug"]
            if slug is None:
                raise ValidationError("Slug cannot be null", field="slug")
            if slug != post.slug and self.post_repo.slug_exists(owner_id, slug, exclude_uuid=post.uuid):
                raise SlugConflictError(slug)
        if "archived" in metadata and metadata["archived"] is None:
            raise ValidationError("Archived cannot be null", field="archived")
        if "category" in metadata and not metadata["category"]:
            metadata["category"] = settings.default_category

    def _load_content(self, path: str, content_hash: str) -> PostContent:
        """Content at the post's current version. A missing one is corruption."""
        try:
            payload = self.version_repo.get(path, content_hash)
        except VersionNotFoundError as e:
            logger.error("Current version pointer dangles", extra={"path": path, "hash": content_hash})
            raise CorruptContentError(path, content_hash, reason="current version missing") from e
        return deserialize_content(payload, path, content_hash)

    def _assemble_from_row(self, post: Post, content: PostContent) -> PostResponse:
        tags = self.post_repo.get_tags_for([post.id]).get(post.id, [])
        return self._assemble(post, content, tags, as_utc(self.clock()))

    @staticmethod
    def _assemble(post: Post, content: PostContent, tags: List[str], now: datetime) -> PostResponse:
        publish_at = as_utc(post.publish_at)
        return PostResponse(
            id=post.id,
            uuid=post.uuid,
            author_id=post.author_id,
            slug=post.slug,
            title=content.title,
            content=content.content,
            description=content.description,
            format=content.format,
            category=post.category,
            tags=sorted(tags),
            archived=post.archived,
            publish_at=publish_at,
            created_at=as_utc(post.created_at),
            updated_at=as_utc(post.updated_at),
            project_id=post.project_id,
            corpus_version=post.corpus_version,
            status=post_status(publish_at, now).value,
        )

    def _commit(self, operation: str) -> None:
        with translate_storage_errors(operation):
            self.db.commit()
