"""Tests for owner tokens and identity resolution."""

from postcorpus.core.token_factory import create_owner_token, decode_owner_token
from tests.conftest import auth_headers, make_post


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_owner_token("alice", "test-secret")
        decoded = decode_owner_token(token, "test-secret")
        assert decoded is not None
        assert decoded.owner_id == "alice"

    def test_wrong_secret_returns_none(self):
        token = create_owner_token("alice", "correct-secret")
        assert decode_owner_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_owner_token("alice", "secret", expires_hours=-1)
        assert decode_owner_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_owner_token("not.a.token", "secret") is None
        assert decode_owner_token("", "secret") is None


class TestAuthDisabledMode:

    def test_requests_act_as_anonymous(self, client):
        resp = client.post("/api/posts", json=make_post())
        assert resp.status_code == 201
        assert resp.json()["author_id"] == "anonymous"


class TestAuthEnabledMode:

    def test_missing_token_is_401(self, client, auth_enabled):
        resp = client.get("/api/posts")
        assert resp.status_code == 401
        assert resp.json()["kind"] == "unauthorized"

    def test_bad_token_is_401(self, client, auth_enabled):
        resp = client.get("/api/posts", headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 401

    def test_token_subject_is_owner(self, client, auth_enabled):
        resp = client.post("/api/posts", json=make_post(), headers=auth_headers("alice"))
        assert resp.status_code == 201
        assert resp.json()["author_id"] == "alice"

    def test_owners_are_isolated(self, client, auth_enabled):
        uuid = client.post("/api/posts", json=make_post(), headers=auth_headers("alice")).json()["uuid"]

        assert client.get(f"/api/posts/{uuid}", headers=auth_headers("bob")).status_code == 404
        resp = client.put(f"/api/posts/{uuid}", json={"title": "mine now"}, headers=auth_headers("bob"))
        assert resp.status_code == 404
        assert client.get("/api/posts", headers=auth_headers("bob")).json()["total_posts"] == 0
