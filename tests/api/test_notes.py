"""Tests for notes endpoints."""

import pytest
from bson import ObjectId


@pytest.mark.asyncio
class TestNotesEndpoints:
    """Test notes endpoints."""

    async def test_create_note(self, api_client, auth_headers, alice):
        """Test creating a note."""
        response = api_client.post(
            "/notes", json={"title": "Plan", "content": "# Plan"}, headers=auth_headers(alice)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Plan"
        assert data["content"] == "# Plan"
        assert data["owner_id"] == alice
        assert data["visibility"] == "private"
        assert data["folder_id"] is None
        assert "id" in data

    async def test_create_note_without_auth(self, api_client):
        """Test notes endpoint requires authentication."""
        response = api_client.post("/notes", json={"title": "Plan"})

        assert response.status_code in (401, 403)

    async def test_create_note_with_invalid_token(self, api_client):
        """Test a forged token is rejected."""
        response = api_client.post(
            "/notes", json={"title": "Plan"}, headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    async def test_create_note_for_unknown_user(self, api_client, auth_headers):
        """Test a valid token for a deleted user is rejected."""
        response = api_client.post(
            "/notes", json={"title": "Plan"}, headers=auth_headers(str(ObjectId()))
        )

        assert response.status_code == 401

    async def test_create_note_in_missing_folder(self, api_client, auth_headers, alice):
        """Test creating a note in a non-existent folder returns 404."""
        response = api_client.post(
            "/notes",
            json={"title": "Lost", "folder_id": str(ObjectId())},
            headers=auth_headers(alice),
        )

        assert response.status_code == 404
        assert response.json()["code"] == "FOLDER_NOT_FOUND"

    async def test_get_note_requires_access(self, api_client, auth_headers, alice, bob):
        """Test a private note is hidden from other users."""
        note = api_client.post(
            "/notes", json={"title": "Secret"}, headers=auth_headers(alice)
        ).json()

        response = api_client.get(f"/notes/{note['id']}", headers=auth_headers(bob))

        assert response.status_code == 403
        assert response.json()["code"] == "ACCESS_DENIED"

    async def test_get_missing_note(self, api_client, auth_headers, alice):
        """Test reading a note that does not exist returns 404."""
        response = api_client.get(f"/notes/{ObjectId()}", headers=auth_headers(alice))

        assert response.status_code == 404

    async def test_get_note_with_invalid_id(self, api_client, auth_headers, alice):
        """Test a malformed note id returns 400."""
        response = api_client.get("/notes/not-an-id", headers=auth_headers(alice))

        assert response.status_code == 400

    async def test_update_note_partial(self, api_client, auth_headers, alice):
        """Test partial update only touches provided fields."""
        headers = auth_headers(alice)
        note = api_client.post(
            "/notes", json={"title": "Plan", "content": "Body"}, headers=headers
        ).json()

        response = api_client.patch(
            f"/notes/{note['id']}", json={"content": "New body"}, headers=headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Plan"
        assert data["content"] == "New body"

    async def test_viewer_cannot_edit(self, api_client, auth_headers, alice, bob):
        """Test viewers are read-only."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()
        api_client.put(
            f"/notes/{note['id']}/permissions",
            json={"user_id": bob, "role": "viewer"},
            headers=auth_headers(alice),
        )

        assert api_client.get(f"/notes/{note['id']}", headers=auth_headers(bob)).status_code == 200
        response = api_client.patch(
            f"/notes/{note['id']}", json={"title": "Hijack"}, headers=auth_headers(bob)
        )
        assert response.status_code == 403

    async def test_editor_can_edit_but_not_delete(self, api_client, auth_headers, alice, bob):
        """Test editors may change content but not delete the note."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()
        api_client.put(
            f"/notes/{note['id']}/permissions",
            json={"user_id": bob, "role": "editor"},
            headers=auth_headers(alice),
        )

        response = api_client.patch(
            f"/notes/{note['id']}", json={"title": "Plan v2"}, headers=auth_headers(bob)
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Plan v2"

        response = api_client.delete(f"/notes/{note['id']}", headers=auth_headers(bob))
        assert response.status_code == 403

    async def test_delete_note_cascades(self, api_client, auth_headers, mock_db, alice, bob):
        """Test deleting a note removes permissions and activity with it."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Doomed"}, headers=headers).json()
        api_client.put(
            f"/notes/{note['id']}/permissions",
            json={"user_id": bob, "role": "editor"},
            headers=headers,
        )

        response = api_client.delete(f"/notes/{note['id']}", headers=headers)

        assert response.status_code == 204
        assert api_client.get(f"/notes/{note['id']}", headers=headers).status_code == 404
        oid = ObjectId(note["id"])
        assert await mock_db.note_permissions.count_documents({"note_id": oid}) == 0
        assert await mock_db.activity_events.count_documents({"note_id": oid}) == 0

    async def test_list_notes_includes_shared(self, api_client, auth_headers, alice, bob):
        """Test the note list contains owned and shared notes."""
        own = api_client.post("/notes", json={"title": "Mine"}, headers=auth_headers(alice)).json()
        shared = api_client.post("/notes", json={"title": "Bob's"}, headers=auth_headers(bob)).json()
        api_client.post("/notes", json={"title": "Bob's private"}, headers=auth_headers(bob))
        api_client.put(
            f"/notes/{shared['id']}/permissions",
            json={"user_id": alice, "role": "viewer"},
            headers=auth_headers(bob),
        )

        response = api_client.get("/notes", headers=auth_headers(alice))

        assert response.status_code == 200
        assert sorted(n["id"] for n in response.json()) == sorted([own["id"], shared["id"]])

    async def test_move_and_reorder_note(self, api_client, auth_headers, alice):
        """Test placing a note in a folder and reordering within it."""
        headers = auth_headers(alice)
        folder = api_client.post("/folders", json={"name": "F"}, headers=headers).json()
        first = api_client.post(
            "/notes", json={"title": "First", "folder_id": folder["id"]}, headers=headers
        ).json()
        second = api_client.post("/notes", json={"title": "Second"}, headers=headers).json()

        response = api_client.post(
            f"/notes/{second['id']}/move", json={"folder_id": folder["id"]}, headers=headers
        )
        assert response.status_code == 204
        assert api_client.get(f"/notes/{second['id']}", headers=headers).json()["order"] == 1

        response = api_client.post(
            f"/notes/{second['id']}/reorder", json={"new_order": 0}, headers=headers
        )
        assert response.status_code == 204
        assert api_client.get(f"/notes/{second['id']}", headers=headers).json()["order"] == 0
        assert api_client.get(f"/notes/{first['id']}", headers=headers).json()["order"] == 1

    async def test_duplicate_readable_note(self, api_client, auth_headers, alice, bob):
        """Test forking a public note creates a private copy for the caller."""
        note = api_client.post(
            "/notes", json={"title": "Recipe", "content": "Flour"}, headers=auth_headers(alice)
        ).json()
        api_client.patch(
            f"/notes/{note['id']}", json={"visibility": "public"}, headers=auth_headers(alice)
        )

        response = api_client.post(f"/notes/{note['id']}/duplicate", headers=auth_headers(bob))

        assert response.status_code == 201
        copy = api_client.get(f"/notes/{response.json()['id']}", headers=auth_headers(bob)).json()
        assert copy["title"] == "Recipe (Copy)"
        assert copy["owner_id"] == bob
        assert copy["visibility"] == "private"

    async def test_my_access(self, api_client, auth_headers, alice, bob):
        """Test the caller's effective role endpoint."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()

        mine = api_client.get(f"/notes/{note['id']}/access", headers=auth_headers(alice)).json()
        theirs = api_client.get(f"/notes/{note['id']}/access", headers=auth_headers(bob)).json()

        assert mine == {"role": "owner", "has_access": True}
        assert theirs == {"role": None, "has_access": False}


@pytest.mark.asyncio
class TestPublicNotes:
    """Test unauthenticated public reads."""

    async def test_public_note_readable_without_auth(self, api_client, auth_headers, alice):
        """Test a public note is served without a token."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Open"}, headers=headers).json()

        assert api_client.get(f"/public/notes/{note['id']}").status_code == 404

        api_client.patch(f"/notes/{note['id']}", json={"visibility": "public"}, headers=headers)
        response = api_client.get(f"/public/notes/{note['id']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Open"

    async def test_shared_note_not_public(self, api_client, auth_headers, alice):
        """Test shared visibility does not expose a note publicly."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Team"}, headers=headers).json()
        api_client.patch(f"/notes/{note['id']}", json={"visibility": "shared"}, headers=headers)

        assert api_client.get(f"/public/notes/{note['id']}").status_code == 404


@pytest.mark.asyncio
class TestSharingScenario:
    """End-to-end create, share, revoke and publish flow."""

    async def test_sharing_flow(self, api_client, auth_headers, alice, bob):
        """Test access follows grants, revocation and visibility."""
        owner = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "N"}, headers=owner).json()
        note_id = note["id"]

        listed = api_client.get("/notes", headers=owner).json()
        assert [n["id"] for n in listed] == [note_id]

        api_client.put(
            f"/notes/{note_id}/permissions", json={"user_id": bob, "role": "editor"}, headers=owner
        )
        access = api_client.get(f"/notes/{note_id}/permissions/{bob}", headers=owner).json()
        assert access == {"role": "editor", "has_access": True}

        api_client.delete(f"/notes/{note_id}/permissions/{bob}", headers=owner)
        access = api_client.get(f"/notes/{note_id}/permissions/{bob}", headers=owner).json()
        assert access == {"role": None, "has_access": False}

        api_client.patch(f"/notes/{note_id}", json={"visibility": "public"}, headers=owner)
        access = api_client.get(f"/notes/{note_id}/permissions/{bob}", headers=owner).json()
        assert access == {"role": "viewer", "has_access": True}
