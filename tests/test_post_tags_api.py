"""Tests for the /api/posts/{uuid}/tags endpoints."""

from tests.conftest import auth_headers, make_post


def _create(client, tags, headers=None):
    return client.post("/api/posts", json=make_post(tags=tags), headers=headers).json()["uuid"]


class TestPostTagsApi:

    def test_get(self, client):
        uuid = _create(client, ["python", "intro"])
        resp = client.get(f"/api/posts/{uuid}/tags")
        assert resp.status_code == 200
        assert resp.json() == {"tags": ["intro", "python"]}

    def test_add_merges_returns_201(self, client):
        uuid = _create(client, ["a"])
        resp = client.post(f"/api/posts/{uuid}/tags", json={"tags": ["b", " a "]})
        assert resp.status_code == 201
        assert resp.json() == {"tags": ["a", "b"]}
        assert client.get(f"/api/posts/{uuid}").json()["tags"] == ["a", "b"]

    def test_put_replaces(self, client):
        uuid = _create(client, ["a", "b"])
        resp = client.put(f"/api/posts/{uuid}/tags", json={"tags": ["c"]})
        assert resp.status_code == 200
        assert resp.json() == {"tags": ["c"]}

    def test_delete(self, client):
        uuid = _create(client, ["a", "b"])
        assert client.delete(f"/api/posts/{uuid}/tags/a").status_code == 204
        assert client.get(f"/api/posts/{uuid}/tags").json() == {"tags": ["b"]}

    def test_delete_missing_tag_is_404(self, client):
        uuid = _create(client, ["a"])
        resp = client.delete(f"/api/posts/{uuid}/tags/nope")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "TAG_NOT_FOUND"
        assert body["kind"] == "not_found"

    def test_unknown_post_is_404(self, client):
        assert client.get("/api/posts/no-such-uuid/tags").status_code == 404

    def test_other_owner_is_404(self, client, auth_enabled):
        uuid = _create(client, ["a"], headers=auth_headers("alice"))
        bob = auth_headers("bob")
        assert client.get(f"/api/posts/{uuid}/tags", headers=bob).status_code == 404
        assert client.post(f"/api/posts/{uuid}/tags", json={"tags": ["b"]}, headers=bob).status_code == 404
        assert client.delete(f"/api/posts/{uuid}/tags/a", headers=bob).status_code == 404
        alice = client.get(f"/api/posts/{uuid}/tags", headers=auth_headers("alice"))
        assert alice.json() == {"tags": ["a"]}
