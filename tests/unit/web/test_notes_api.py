"""Tests for the notes HTTP API."""

from uuid import uuid4

import pytest

from tests.support import bearer, signup


@pytest.fixture
def headers(client, outbox):
    """Authorization headers of a freshly registered user."""
    return bearer(signup(client, outbox)["tokens"]["accessToken"])


def create(client, headers, title="Groceries", content="Milk, eggs", tags=None):
    response = client.post("/api/notes", json={"title": title, "content": content, "tags": tags or []}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["note"]


class TestNotesApi:
    """Tests for /api/notes CRUD."""

    def test_requires_token(self, client):
        response = client.get("/api/notes")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_create(self, client, headers):
        response = client.post(
            "/api/notes", json={"title": "Groceries", "content": "Milk", "tags": ["home", "home"]}, headers=headers
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Note created successfully"
        note = body["data"]["note"]
        assert note["title"] == "Groceries"
        assert note["tags"] == ["home"]
        assert "id" in note

    def test_create_validation(self, client, headers):
        """Test empty titles and too many tags are rejected."""
        response = client.post("/api/notes", json={"title": "", "content": "x"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "title"

        tags = [f"t{i}" for i in range(11)]
        response = client.post("/api/notes", json={"title": "T", "content": "x", "tags": tags}, headers=headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "tags"

    def test_list_with_pagination(self, client, headers):
        for i in range(3):
            create(client, headers, title=f"Note {i}")

        response = client.get("/api/notes", params={"page": 1, "limit": 2}, headers=headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["notes"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    def test_list_search_and_tags(self, client, headers):
        create(client, headers, title="Groceries", content="Milk", tags=["home"])
        create(client, headers, title="Standup", content="Budget", tags=["work"])

        found = client.get("/api/notes", params={"search": "MILK"}, headers=headers).json()["data"]["notes"]
        assert [note["title"] for note in found] == ["Groceries"]

        tagged = client.get("/api/notes", params={"tags": "work,other"}, headers=headers).json()["data"]["notes"]
        assert [note["title"] for note in tagged] == ["Standup"]

    def test_limit_bounds(self, client, headers):
        response = client.get("/api/notes", params={"limit": 101}, headers=headers)
        assert response.status_code == 400

    def test_get_update_delete(self, client, headers):
        note = create(client, headers)
        url = f"/api/notes/{note['id']}"

        assert client.get(url, headers=headers).json()["data"]["note"]["title"] == "Groceries"

        response = client.put(url, json={"title": "Shopping", "content": "Bread", "tags": ["x"]}, headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Note updated successfully"
        assert response.json()["data"]["note"]["title"] == "Shopping"

        response = client.delete(url, headers=headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Note deleted successfully"}

        response = client.get(url, headers=headers)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Note not found"}

    def test_unknown_and_malformed_ids(self, client, headers):
        assert client.get(f"/api/notes/{uuid4()}", headers=headers).status_code == 404
        assert client.get("/api/notes/not-a-uuid", headers=headers).status_code == 400

    def test_notes_are_private(self, client, outbox, headers):
        """Test another user cannot read or change a note."""
        note = create(client, headers)
        other = bearer(signup(client, outbox, email="c@d.com")["tokens"]["accessToken"])
        url = f"/api/notes/{note['id']}"

        assert client.get(url, headers=other).status_code == 404
        assert client.delete(url, headers=other).status_code == 404
        assert client.get("/api/notes", headers=other).json()["data"]["pagination"]["total"] == 0
        assert client.get(url, headers=headers).status_code == 200
