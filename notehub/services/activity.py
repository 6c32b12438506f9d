"""Append-only activity log for notes.

Events are written in the same transaction as the change they describe and
are never updated afterwards. The only removal path is the bulk delete that
runs when their note is deleted.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import BaseModel

from ..database import Transaction, to_object_id
from ..models import ActivityEvent, EventType
from ..models.activity import activity_entry_adapter, activity_event_adapter
from ..observability import get_app_metrics, get_tracer
from .users import get_user_summaries

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


class ActivityLog:
    """Records and reads note activity events."""

    async def log(
        self,
        tx: Transaction,
        note_id: str,
        event_type: EventType,
        actor_id: str,
        metadata: BaseModel | dict[str, Any] | None = None,
    ) -> str:
        """Append one event and return its id.

        ``metadata`` defaults to an empty payload of the variant for
        ``event_type``; extra keys are stored untouched.
        """
        with tracer.start_as_current_span("activity.log") as span:
            note_oid = to_object_id(note_id, "note")
            actor_oid = to_object_id(actor_id, "user")

            if isinstance(metadata, BaseModel):
                metadata = metadata.model_dump(exclude_none=True)
            entry = activity_entry_adapter.validate_python(
                {"type": event_type, "metadata": metadata or {}}
            )

            event_doc = {
                "note_id": note_oid,
                "type": entry.type,
                "actor_id": actor_oid,
                "metadata": entry.metadata.model_dump(exclude_none=True),
                "created_at": datetime.now(UTC),
            }
            result = await tx.activity_events.insert_one(event_doc, session=tx.session)
            event_id = str(result.inserted_id)

            span.set_attribute("note.id", str(note_oid))
            span.set_attribute("activity.type", entry.type)
            get_app_metrics().activity_events.add(1, {"type": entry.type})
            logger.info(
                "activity_logged",
                event_id=event_id,
                note_id=str(note_oid),
                type=entry.type,
                actor_id=str(actor_oid),
            )

            return event_id

    async def get_note_activity(self, tx: Transaction, note_id: str) -> list[ActivityEvent]:
        """All events for a note, newest first, each joined with its actor."""
        with tracer.start_as_current_span("activity.get_note_activity") as span:
            note_oid = to_object_id(note_id, "note")
            span.set_attribute("note.id", str(note_oid))

            cursor = tx.activity_events.find({"note_id": note_oid}, session=tx.session).sort(
                [("created_at", -1), ("_id", -1)]
            )
            docs = await cursor.to_list(length=None)
            actors = await get_user_summaries(tx, (doc["actor_id"] for doc in docs))

            events = [
                activity_event_adapter.validate_python(
                    {
                        "id": str(doc["_id"]),
                        "note_id": str(doc["note_id"]),
                        "type": doc["type"],
                        "actor_id": str(doc["actor_id"]),
                        "metadata": doc.get("metadata") or {},
                        "created_at": doc["created_at"],
                        "actor": actors.get(doc["actor_id"]),
                    }
                )
                for doc in docs
            ]

            span.set_attribute("activity.count", len(events))
            logger.debug("note_activity_listed", note_id=str(note_oid), count=len(events))
            return events

    async def delete_for_note(self, tx: Transaction, note_id) -> int:
        """Remove every event of a note; part of the note delete cascade."""
        result = await tx.activity_events.delete_many(
            {"note_id": to_object_id(note_id, "note")}, session=tx.session
        )
        return result.deleted_count
