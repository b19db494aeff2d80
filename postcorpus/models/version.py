"""Version store models.

Payload bytes live once per content hash in ``content_blobs``; lineage
nodes in ``version_records`` reference them. Both tables are append-only.
"""

from sqlalchemy import Column, Index, Integer, String, DateTime, LargeBinary, ForeignKey
from ..database import Base


class ContentBlob(Base):
    """Immutable payload bytes, shared by every lineage node with the same hash."""

    __tablename__ = "content_blobs"

    content_hash = Column(String(64), primary_key=True)  # SHA-256 hex of payload
    payload = Column(LargeBinary, nullable=False)
    size = Column(Integer, nullable=False)


class VersionRecord(Base):
    """One node of a namespace path's lineage."""

    __tablename__ = "version_records"
    __table_args__ = (
        Index("ix_version_records_path_hash", "namespace_path", "content_hash"),
        Index("ix_version_records_path_seq", "namespace_path", "seq"),
    )

    # Write order; breaks created_at ties
    seq = Column(Integer, primary_key=True, autoincrement=True)

    namespace_path = Column(String(255), nullable=False)  # posts/{owner_id}/{uuid}
    content_hash = Column(String(64), ForeignKey("content_blobs.content_hash"), nullable=False)
    parent_hash = Column(String(64), nullable=True)  # NULL for the root version

    created_at = Column(DateTime(timezone=True), nullable=False)
