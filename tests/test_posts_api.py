"""Tests for the /api/posts endpoints."""

from datetime import timedelta

from tests.conftest import make_post


class TestCreatePost:

    def test_create_returns_201(self, client):
        resp = client.post("/api/posts", json=make_post(tags=["intro"]))
        assert resp.status_code == 201
        data = resp.json()
        assert data["slug"] == "hello-world"
        assert data["status"] == "draft"
        assert data["tags"] == ["intro"]
        assert data["author_id"] == "anonymous"

    def test_invalid_slug_rejected(self, client):
        resp = client.post("/api/posts", json=make_post(slug="Not A Slug"))
        assert resp.status_code == 422

    def test_unsupported_format_rejected(self, client):
        resp = client.post("/api/posts", json=make_post(format="html"))
        assert resp.status_code == 422

    def test_duplicate_slug_is_409(self, client):
        client.post("/api/posts", json=make_post())
        resp = client.post("/api/posts", json=make_post())
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "SLUG_CONFLICT"
        assert body["kind"] == "conflict"


class TestGetPost:

    def test_get_by_uuid_and_slug(self, client):
        uuid = client.post("/api/posts", json=make_post()).json()["uuid"]
        assert client.get(f"/api/posts/{uuid}").json()["uuid"] == uuid
        assert client.get("/api/posts/hello-world").json()["uuid"] == uuid

    def test_missing_is_404(self, client):
        resp = client.get("/api/posts/nope")
        assert resp.status_code == 404
        assert resp.json()["kind"] == "not_found"


class TestUpdatePost:

    def test_partial_update(self, client):
        created = client.post("/api/posts", json=make_post(tags=["a"])).json()
        resp = client.put(f"/api/posts/{created['uuid']}", json={"title": "Renamed"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Renamed"
        assert data["content"] == created["content"]
        assert data["tags"] == ["a"]
        assert data["corpus_version"] != created["corpus_version"]

    def test_explicit_null_publish_at_makes_draft(self, client, clock):
        created = client.post(
            "/api/posts",
            json=make_post(publish_at=(clock.now - timedelta(days=1)).isoformat()),
        ).json()
        assert created["status"] == "published"
        resp = client.put(f"/api/posts/{created['uuid']}", json={"publish_at": None})
        assert resp.json()["status"] == "draft"

    def test_blank_title_is_400(self, client):
        uuid = client.post("/api/posts", json=make_post()).json()["uuid"]
        resp = client.put(f"/api/posts/{uuid}", json={"title": "   "})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation"

    def test_update_missing_is_404(self, client):
        resp = client.put("/api/posts/does-not-exist", json={"title": "x"})
        assert resp.status_code == 404


class TestDeletePost:

    def test_delete(self, client):
        uuid = client.post("/api/posts", json=make_post()).json()["uuid"]
        assert client.delete(f"/api/posts/{uuid}").status_code == 204
        assert client.get(f"/api/posts/{uuid}").status_code == 404


class TestListPosts:

    def test_default_envelope(self, client):
        client.post("/api/posts", json=make_post())
        resp = client.get("/api/posts")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_posts"] == 1
        assert data["total_pages"] == 1
        assert data["per_page"] == 10
        assert data["current_page"] == 1

    def test_status_filter(self, client, clock):
        client.post("/api/posts", json=make_post(slug="draft"))
        client.post(
            "/api/posts",
            json=make_post(slug="live", publish_at=(clock.now - timedelta(hours=1)).isoformat()),
        )
        published = client.get("/api/posts", params={"status": "published"}).json()
        assert [p["slug"] for p in published["posts"]] == ["live"]
        drafts = client.get("/api/posts", params={"status": "draft"}).json()
        assert [p["slug"] for p in drafts["posts"]] == ["draft"]

    def test_limit_out_of_range(self, client):
        assert client.get("/api/posts", params={"limit": 0}).status_code == 422
        assert client.get("/api/posts", params={"limit": 101}).status_code == 422

    def test_unknown_status_rejected(self, client):
        assert client.get("/api/posts", params={"status": "bogus"}).status_code == 422
