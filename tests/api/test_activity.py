"""Tests for note activity endpoints."""

import pytest


@pytest.mark.asyncio
class TestActivityEndpoints:
    """Test activity log endpoints."""

    async def test_edit_is_logged(self, api_client, auth_headers, alice):
        """Test a note update records an edit event with the changed fields."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Plan"}, headers=headers).json()
        api_client.patch(
            f"/notes/{note['id']}", json={"title": "Plan v2", "content": "x"}, headers=headers
        )

        events = api_client.get(f"/notes/{note['id']}/activity", headers=headers).json()

        assert len(events) == 1
        event = events[0]
        assert event["type"] == "edit"
        assert event["metadata"]["fields"] == ["content", "title"]
        assert event["actor"] == {"name": "Alice", "email": "alice@example.com"}

    async def test_log_comment_event(self, api_client, auth_headers, alice):
        """Test posting a comment event with typed and extra metadata."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Plan"}, headers=headers).json()

        response = api_client.post(
            f"/notes/{note['id']}/activity",
            json={"type": "comment", "metadata": {"comment_id": "c1", "line_number": 4, "quote": "hi"}},
            headers=headers,
        )

        assert response.status_code == 201
        events = api_client.get(f"/notes/{note['id']}/activity", headers=headers).json()
        assert events[0]["id"] == response.json()["id"]
        assert events[0]["metadata"]["comment_id"] == "c1"
        assert events[0]["metadata"]["line_number"] == 4
        assert events[0]["metadata"]["quote"] == "hi"

    async def test_log_event_without_metadata(self, api_client, auth_headers, alice):
        """Test metadata defaults to an empty payload."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Plan"}, headers=headers).json()

        response = api_client.post(
            f"/notes/{note['id']}/activity", json={"type": "resolve"}, headers=headers
        )

        assert response.status_code == 201

    async def test_log_unknown_event_type(self, api_client, auth_headers, alice):
        """Test unknown event types are rejected."""
        headers = auth_headers(alice)
        note = api_client.post("/notes", json={"title": "Plan"}, headers=headers).json()

        response = api_client.post(
            f"/notes/{note['id']}/activity", json={"type": "delete"}, headers=headers
        )

        assert response.status_code == 422

    async def test_service_event_types_cannot_be_posted(
        self, api_client, auth_headers, mock_db, alice, bob
    ):
        """Test readers cannot forge permission, edit or fork entries."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()
        api_client.patch(
            f"/notes/{note['id']}", json={"visibility": "public"}, headers=auth_headers(alice)
        )
        before = await mock_db.activity_events.count_documents({})

        forged = [
            {"type": "permission", "metadata": {"action": "grant", "user_id": bob, "role": "owner"}},
            {"type": "edit", "metadata": {"fields": ["content"]}},
            {"type": "fork", "metadata": {"forked_note_id": note["id"]}},
        ]
        for body in forged:
            response = api_client.post(
                f"/notes/{note['id']}/activity", json=body, headers=auth_headers(bob)
            )
            assert response.status_code == 422

        assert await mock_db.activity_events.count_documents({}) == before

    async def test_reader_can_comment_on_public_note(self, api_client, auth_headers, alice, bob):
        """Test any reader may report a comment event."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()
        api_client.patch(
            f"/notes/{note['id']}", json={"visibility": "public"}, headers=auth_headers(alice)
        )

        response = api_client.post(
            f"/notes/{note['id']}/activity",
            json={"type": "comment", "metadata": {"comment_id": "c9"}},
            headers=auth_headers(bob),
        )

        assert response.status_code == 201

    async def test_activity_requires_access(self, api_client, auth_headers, alice, bob):
        """Test activity of a private note is hidden from other users."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()

        response = api_client.get(f"/notes/{note['id']}/activity", headers=auth_headers(bob))

        assert response.status_code == 403

    async def test_fork_is_logged_on_source(self, api_client, auth_headers, alice, bob):
        """Test duplicating a note records a fork event on the original."""
        note = api_client.post("/notes", json={"title": "Plan"}, headers=auth_headers(alice)).json()
        api_client.put(
            f"/notes/{note['id']}/permissions",
            json={"user_id": bob, "role": "viewer"},
            headers=auth_headers(alice),
        )
        copy = api_client.post(f"/notes/{note['id']}/duplicate", headers=auth_headers(bob)).json()

        events = api_client.get(f"/notes/{note['id']}/activity", headers=auth_headers(alice)).json()

        fork = next(e for e in events if e["type"] == "fork")
        assert fork["actor_id"] == bob
        assert fork["metadata"]["forked_note_id"] == copy["id"]
