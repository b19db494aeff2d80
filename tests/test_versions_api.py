"""Tests for the /api/posts/{uuid}/versions endpoints."""

from tests.conftest import make_post


def _create_with_history(client):
    created = client.post("/api/posts", json=make_post(content="v1")).json()
    client.put(f"/api/posts/{created['uuid']}", json={"content": "v2"})
    return created


class TestVersions:

    def test_update_creates_version(self, client):
        created = _create_with_history(client)
        resp = client.get(f"/api/posts/{created['uuid']}/versions")
        assert resp.status_code == 200
        versions = resp.json()
        assert len(versions) == 2
        assert versions[0]["parent_hash"] == versions[1]["hash"]

    def test_get_version_content(self, client):
        created = _create_with_history(client)
        resp = client.get(f"/api/posts/{created['uuid']}/versions/{created['corpus_version']}")
        assert resp.status_code == 200
        assert resp.json()["content"] == "v1"

    def test_restore(self, client):
        created = _create_with_history(client)
        uuid = created["uuid"]
        resp = client.post(f"/api/posts/{uuid}/versions/{created['corpus_version']}/restore")
        assert resp.status_code == 200
        assert resp.json()["content"] == "v1"

        lineage = client.get(f"/api/posts/{uuid}/lineage").json()
        assert len(lineage) == 3
        assert lineage[0]["hash"] == lineage[2]["hash"] == created["corpus_version"]

    def test_unknown_version_is_404(self, client):
        uuid = client.post("/api/posts", json=make_post()).json()["uuid"]
        resp = client.get(f"/api/posts/{uuid}/versions/{'a' * 64}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"

    def test_versions_404_for_nonexistent_post(self, client):
        assert client.get("/api/posts/missing/versions").status_code == 404
