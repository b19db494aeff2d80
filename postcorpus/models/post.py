"""Post metadata model.

Content (title, body, description, format) is not stored here; the row
only points at the current version in the version store.
"""

from sqlalchemy import Column, Index, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


class Post(Base):
    """Mutable routing and identity data for one post."""

    __tablename__ = "posts"
    __table_args__ = (
        UniqueConstraint("author_id", "slug", name="uq_posts_author_slug"),
        Index("ix_posts_author_id", "author_id"),
        Index("ix_posts_updated_at", "updated_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Stable identifier; half of the version store namespace path
    uuid = Column(String(36), nullable=False, unique=True)
    author_id = Column(String(50), nullable=False)

    slug = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, default="root")

    # Current version hash in the version store
    corpus_version = Column(String(64), nullable=False)

    archived = Column(Boolean, nullable=False, default=False)

    # NULL = draft, future = scheduled, past or now = published
    publish_at = Column(DateTime(timezone=True), nullable=True)

    # Linked external project (e.g. a devpad project id)
    project_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    tags = relationship("PostTag", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)


class PostTag(Base):
    """Many-to-many tag label attached to a post."""

    __tablename__ = "post_tags"
    __table_args__ = (
        Index("ix_post_tags_tag", "tag"),
    )

    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String(100), primary_key=True)

    post = relationship("Post", back_populates="tags")
