"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from api.main import app
from config import settings


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _child(node, segment):
    return next(c for c in node["children"] if c["path"][-1] == segment)


class TestCompareEndpoint:

    def test_added_key(self, client):
        response = client.post("/api/compare", json={
            "old_value": {"a": 1},
            "new_value": {"a": 1, "b": 2},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["is_identical"] is False
        assert data["stats"] == {"added": 1, "deleted": 0, "modified": 1, "unchanged": 1}
        assert data["root"]["type"] == "modified"
        assert data["root"]["path"] == []

        added = _child(data["root"], "b")
        assert added["type"] == "added"
        assert added["new_value"] == 2
        assert "old_value" not in added

    def test_identical(self, client):
        response = client.post("/api/compare", json={"old_value": [1, 2], "new_value": [1, 2]})
        assert response.status_code == 200
        assert response.json()["is_identical"] is True

    def test_null_values_are_kept(self, client):
        response = client.post("/api/compare", json={
            "old_value": {"a": None},
            "new_value": {"a": 1},
        })
        child = _child(response.json()["root"], "a")
        assert child["type"] == "modified"
        assert child["old_value"] is None
        assert child["new_value"] == 1

    def test_options(self, client):
        response = client.post("/api/compare", json={
            "old_value": [1, 2, 3],
            "new_value": [1, 3],
            "options": {"sequence_diff_mode": "positional", "ignore_keys": ["x"]},
        })
        children = response.json()["root"]["children"]
        assert [c["type"] for c in children] == ["unchanged", "modified", "deleted"]

    def test_max_depth_option(self, client):
        response = client.post("/api/compare", json={
            "old_value": {"a": {"b": 1}},
            "new_value": {"a": {"b": 2}},
            "options": {"max_depth": 1},
        })
        child = _child(response.json()["root"], "a")
        assert child["old_value"] == "[Max Depth Reached]"
        assert "children" not in child

    @pytest.mark.parametrize("options", [
        {"max_depth": -1},
        {"sequence_diff_mode": "fuzzy"},
    ])
    def test_invalid_options(self, client, options):
        response = client.post("/api/compare", json={
            "old_value": 1,
            "new_value": 2,
            "options": options,
        })
        assert response.status_code == 422

    def test_server_default_depth_applies_when_omitted(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_MAX_DEPTH", 1)

        response = client.post("/api/compare", json={
            "old_value": {"a": {"b": 1}},
            "new_value": {"a": {"b": 2}},
            "options": {"sequence_diff_mode": "lcs"},
        })

        child = _child(response.json()["root"], "a")
        assert child["old_value"] == "[Max Depth Reached]"

    def test_null_max_depth_means_unbounded(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_MAX_DEPTH", 1)

        response = client.post("/api/compare", json={
            "old_value": {"a": {"b": 1}},
            "new_value": {"a": {"b": 2}},
            "options": {"max_depth": None},
        })

        child = _child(response.json()["root"], "a")
        leaf = _child(child, "b")
        assert leaf["old_value"] == 1
        assert leaf["new_value"] == 2

    def test_bad_server_default_is_400(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_SEQUENCE_DIFF_MODE", "fuzzy")

        response = client.post("/api/compare", json={"old_value": 1, "new_value": 2})

        assert response.status_code == 400
        assert "sequence_diff_mode" in response.json()["detail"]


class TestCompareFilesEndpoint:

    def test_compare_files(self, client):
        response = client.post("/api/compare/files", files={
            "before_file": ("before.json", b'{"port": 80}', "application/json"),
            "after_file": ("after.json", b'{"port": 8080}', "application/json"),
        })

        assert response.status_code == 200
        data = response.json()
        assert data["before_file"] == "before.json"
        assert data["after_file"] == "after.json"
        assert data["stats"]["modified"] == 2

    def test_rejects_non_json_filename(self, client):
        response = client.post("/api/compare/files", files={
            "before_file": ("before.txt", b"{}", "text/plain"),
            "after_file": ("after.json", b"{}", "application/json"),
        })
        assert response.status_code == 400

    def test_rejects_invalid_json(self, client):
        response = client.post("/api/compare/files", files={
            "before_file": ("before.json", b"{}", "application/json"),
            "after_file": ("after.json", b"{broken", "application/json"),
        })
        assert response.status_code == 400
        assert "after" in response.json()["detail"]


class TestValidateEndpoint:

    def test_valid(self, client):
        response = client.post("/api/validate", json={"text": '{"a":1}'})
        data = response.json()
        assert data["is_valid"] is True
        assert data["formatted"] == '{\n  "a": 1\n}'
        assert "error" not in data

    def test_invalid(self, client):
        response = client.post("/api/validate", json={"text": "{bad"})
        data = response.json()
        assert data["is_valid"] is False
        assert data["error"]
        assert "formatted" not in data

    def test_blank(self, client):
        response = client.post("/api/validate", json={"text": "  "})
        data = response.json()
        assert data["is_valid"] is True
        assert "formatted" not in data


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
