"""Content-addressed version store.

Knows nothing about posts: it stores opaque payload bytes under a namespace
path, names each payload by its SHA-256 digest and records parent links.
Records are only ever appended; nothing here updates or deletes a version.
"""

import hashlib
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, as_utc, utc_now
from ..exceptions import CorruptContentError, VersionNotFoundError
from ..models import ContentBlob, VersionRecord
from ..schemas.version import VersionInfo
from .base import translate_storage_errors

logger = logging.getLogger(__name__)


def compute_content_hash(payload: bytes) -> str:
    """SHA-256 hex digest of the payload bytes."""
    return hashlib.sha256(payload).hexdigest()


def _to_info(record: VersionRecord) -> VersionInfo:
    return VersionInfo(
        hash=record.content_hash,
        parent_hash=record.parent_hash,
        created_at=as_utc(record.created_at),
    )


class VersionRepository:
    """Append-only lineage of payloads per namespace path.

    Version identity is (namespace_path, content_hash); the same payload
    written twice with different parents yields two lineage nodes sharing
    one ``ContentBlob``.
    """

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def put(self, namespace_path: str, payload: bytes, parent_hash: Optional[str] = None) -> str:
        """Store *payload* as a child of *parent_hash* and return its hash.

        Replaying the most recent write of a path (same hash, same parent)
        returns the existing hash without appending. A payload identical to
        its parent is not a new version either.

        Raises:
            VersionNotFoundError: parent_hash is not a version of this path.
        """
        if not isinstance(payload, (bytes, bytearray)):
            raise TypeError("payload must be bytes")
        payload = bytes(payload)
        content_hash = compute_content_hash(payload)

        with translate_storage_errors("version put"):
            if parent_hash is not None:
                if not self.exists(namespace_path, parent_hash):
                    raise VersionNotFoundError(namespace_path, parent_hash)
                if parent_hash == content_hash:
                    logger.debug(
                        "Payload equals parent, nothing to store",
                        extra={"path": namespace_path, "hash": content_hash},
                    )
                    return content_hash

            latest = self._latest_record(namespace_path)
            if latest is not None and latest.content_hash == content_hash and latest.parent_hash == parent_hash:
                logger.debug(
                    "Replayed write of current version",
                    extra={"path": namespace_path, "hash": content_hash},
                )
                return content_hash

            self._store_blob(namespace_path, content_hash, payload)

            created_at = as_utc(self.clock())
            if latest is not None:
                # created_at never decreases within a path
                created_at = max(created_at, as_utc(latest.created_at))

            record = VersionRecord(
                namespace_path=namespace_path,
                content_hash=content_hash,
                parent_hash=parent_hash,
                created_at=created_at,
            )
            self.db.add(record)
            self.db.flush()

        logger.info(
            "Stored version",
            extra={"path": namespace_path, "hash": content_hash, "parent_hash": parent_hash},
        )
        return content_hash

    def get(self, namespace_path: str, content_hash: str) -> bytes:
        """Return the payload stored under *content_hash* for this path.

        Raises:
            VersionNotFoundError: unknown path or hash.
            CorruptContentError: stored bytes do not hash to *content_hash*.
        """
        with translate_storage_errors("version get"):
            if not self.exists(namespace_path, content_hash):
                raise VersionNotFoundError(namespace_path, content_hash)
            blob = self.db.get(ContentBlob, content_hash)

        if blob is None:
            raise CorruptContentError(namespace_path, content_hash, reason="payload missing")

        payload = bytes(blob.payload)
        if compute_content_hash(payload) != content_hash:
            logger.error(
                "Hash verification failed",
                extra={"path": namespace_path, "hash": content_hash},
            )
            raise CorruptContentError(namespace_path, content_hash)
        return payload

    def exists(self, namespace_path: str, content_hash: str) -> bool:
        with translate_storage_errors("version lookup"):
            return self.db.query(VersionRecord.seq).filter(
                VersionRecord.namespace_path == namespace_path,
                VersionRecord.content_hash == content_hash,
            ).first() is not None

    def list_versions(self, namespace_path: str) -> List[VersionInfo]:
        """All lineage nodes of a path, newest first. Empty for unknown paths."""
        with translate_storage_errors("version list"):
            records = self.db.query(VersionRecord).filter(
                VersionRecord.namespace_path == namespace_path
            ).order_by(VersionRecord.created_at.desc(), VersionRecord.seq.desc()).all()
        return [_to_info(r) for r in records]

    def lineage(self, namespace_path: str, head_hash: str) -> List[VersionInfo]:
        """Walk parent links from *head_hash* back to the root.

        A hash can occur in several nodes after a restore; each step takes
        the newest node with that hash written before the child, which keeps
        the walk finite and in write order.

        Raises:
            VersionNotFoundError: head_hash is not a version of this path.
            CorruptContentError: a parent link points at no earlier node.
        """
        with translate_storage_errors("version lineage"):
            records = self.db.query(VersionRecord).filter(
                VersionRecord.namespace_path == namespace_path
            ).order_by(VersionRecord.seq.asc()).all()

        heads = [r for r in records if r.content_hash == head_hash]
        if not heads:
            raise VersionNotFoundError(namespace_path, head_hash)

        node = heads[-1]
        chain = [node]
        while node.parent_hash is not None:
            earlier = [
                r for r in records
                if r.content_hash == node.parent_hash and r.seq < node.seq
            ]
            if not earlier:
                raise CorruptContentError(namespace_path, node.parent_hash, reason="parent missing from lineage")
            node = earlier[-1]
            chain.append(node)
        return [_to_info(r) for r in chain]

    def _latest_record(self, namespace_path: str) -> Optional[VersionRecord]:
        return self.db.query(VersionRecord).filter(
            VersionRecord.namespace_path == namespace_path
        ).order_by(VersionRecord.seq.desc()).first()

    def _store_blob(self, namespace_path: str, content_hash: str, payload: bytes) -> None:
        """Insert the payload once per hash; later writers reuse it."""
        existing = self.db.get(ContentBlob, content_hash)
        if existing is not None:
            if compute_content_hash(bytes(existing.payload)) != content_hash:
                raise CorruptContentError(namespace_path, content_hash)
            return

        # A concurrent insert of the same hash surfaces as UnavailableError;
        # the caller may retry and will then reuse the stored blob.
        self.db.add(ContentBlob(content_hash=content_hash, payload=payload, size=len(payload)))
        self.db.flush()
