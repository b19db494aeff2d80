"""Tests for the content-addressed version store.

Exercises VersionRepository directly: hashing, byte deduplication, replay
idempotence, integrity verification, ordering and lineage walks.
"""

import hashlib

import pytest

from postcorpus.exceptions import CorruptContentError, ErrorKind, VersionNotFoundError
from postcorpus.models import ContentBlob, VersionRecord
from postcorpus.repositories import VersionRepository, compute_content_hash
from tests.conftest import FixedClock

PATH = "posts/alice/0b7d5c1e-0000-4000-8000-000000000001"


@pytest.fixture()
def store(db, clock):
    return VersionRepository(db, clock)


class TestPutGet:

    def test_round_trip_returns_exact_bytes(self, store):
        payload = b'{"content":"hi","title":"T"}'
        h = store.put(PATH, payload)
        assert store.get(PATH, h) == payload

    def test_hash_is_sha256_of_payload(self, store):
        payload = "héllo".encode("utf-8")
        assert store.put(PATH, payload) == hashlib.sha256(payload).hexdigest()
        assert compute_content_hash(payload) == hashlib.sha256(payload).hexdigest()

    def test_non_bytes_payload_rejected(self, store):
        with pytest.raises(TypeError):
            store.put(PATH, "not bytes")

    def test_unknown_hash_is_not_found(self, store):
        store.put(PATH, b"a")
        with pytest.raises(VersionNotFoundError) as exc:
            store.get(PATH, compute_content_hash(b"never written"))
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_hash_is_scoped_to_path(self, store):
        h = store.put(PATH, b"shared")
        with pytest.raises(VersionNotFoundError):
            store.get("posts/bob/other", h)

    def test_unknown_parent_is_not_found(self, store):
        with pytest.raises(VersionNotFoundError):
            store.put(PATH, b"child", parent_hash=compute_content_hash(b"ghost"))

    def test_exists(self, store):
        h = store.put(PATH, b"x")
        assert store.exists(PATH, h)
        assert not store.exists(PATH, compute_content_hash(b"y"))


class TestIdempotence:

    def test_replaying_latest_write_adds_nothing(self, db, store):
        h1 = store.put(PATH, b"v1")
        h2 = store.put(PATH, b"v2", parent_hash=h1)
        assert store.put(PATH, b"v2", parent_hash=h1) == h2
        assert len(store.list_versions(PATH)) == 2

    def test_payload_equal_to_parent_is_noop(self, store):
        h1 = store.put(PATH, b"same")
        assert store.put(PATH, b"same", parent_hash=h1) == h1
        assert len(store.list_versions(PATH)) == 1

    def test_same_payload_in_two_paths_shares_one_blob(self, db, store):
        h = store.put(PATH, b"dedup me")
        assert store.put("posts/alice/another", b"dedup me") == h
        assert db.query(ContentBlob).filter(ContentBlob.content_hash == h).count() == 1
        assert db.query(VersionRecord).filter(VersionRecord.content_hash == h).count() == 2


class TestIntegrity:

    def test_tampered_payload_is_corrupt(self, db, store):
        h = store.put(PATH, b"original")
        db.query(ContentBlob).filter(ContentBlob.content_hash == h).update(
            {ContentBlob.payload: b"tampered"}, synchronize_session=False
        )
        db.expire_all()

        with pytest.raises(CorruptContentError) as exc:
            store.get(PATH, h)
        assert exc.value.kind == ErrorKind.CORRUPT


class TestOrdering:

    def test_list_versions_newest_first(self, store, clock):
        h1 = store.put(PATH, b"1")
        clock.advance(minutes=1)
        h2 = store.put(PATH, b"2", parent_hash=h1)
        clock.advance(minutes=1)
        h3 = store.put(PATH, b"3", parent_hash=h2)

        versions = store.list_versions(PATH)
        assert [v.hash for v in versions] == [h3, h2, h1]
        assert versions[0].parent_hash == h2
        assert versions[-1].parent_hash is None

    def test_same_timestamp_ordered_by_write_sequence(self, store):
        h1 = store.put(PATH, b"1")
        h2 = store.put(PATH, b"2", parent_hash=h1)
        assert [v.hash for v in store.list_versions(PATH)] == [h2, h1]

    def test_created_at_never_decreases(self, db):
        clock = FixedClock()
        store = VersionRepository(db, clock)
        h1 = store.put(PATH, b"1")
        clock.advance(hours=-1)
        store.put(PATH, b"2", parent_hash=h1)

        newest, oldest = store.list_versions(PATH)
        assert newest.created_at >= oldest.created_at

    def test_unknown_path_lists_empty(self, store):
        assert store.list_versions("posts/nobody/nothing") == []


class TestLineage:

    def test_walks_back_to_root(self, store):
        h1 = store.put(PATH, b"1")
        h2 = store.put(PATH, b"2", parent_hash=h1)
        h3 = store.put(PATH, b"3", parent_hash=h2)
        assert [v.hash for v in store.lineage(PATH, h3)] == [h3, h2, h1]

    def test_restored_hash_extends_history(self, store):
        # 1 -> 2 -> 1 again: the second node with hash 1 points at 2.
        h1 = store.put(PATH, b"1")
        h2 = store.put(PATH, b"2", parent_hash=h1)
        assert store.put(PATH, b"1", parent_hash=h2) == h1

        chain = store.lineage(PATH, h1)
        assert [v.hash for v in chain] == [h1, h2, h1]
        assert len(store.list_versions(PATH)) == 3

    def test_unknown_head_is_not_found(self, store):
        with pytest.raises(VersionNotFoundError):
            store.lineage(PATH, compute_content_hash(b"nope"))
