"""Note lifecycle: creation, reads, partial updates, placement and deletion.

A note is created together with its owner permission row. Deleting a note
runs an explicit cascade over every record set whose lifecycle belongs to it:
permission rows, comment rows, activity events and finally the note row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from bson import ObjectId

from ..database import Transaction, optional_object_id, to_object_id
from ..exceptions import ErrorCode, NotFoundError, OwnershipError
from ..models import EditMetadata, ForkMetadata, NoteResponse, Visibility
from ..observability import get_app_metrics, get_tracer
from .activity import ActivityLog
from .ordering import apply_reorder, load_siblings, next_order
from .permissions import PermissionResolver

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass
class CascadeResult:
    """Row counts removed by a note delete cascade."""

    permissions: int = 0
    comments: int = 0
    activity_events: int = 0
    note: int = 0


def _doc_to_response(doc: dict) -> NoteResponse:
    return NoteResponse(
        id=str(doc["_id"]),
        title=doc["title"],
        content=doc.get("content", ""),
        owner_id=str(doc["owner_id"]),
        folder_id=str(doc["folder_id"]) if doc.get("folder_id") else None,
        order=doc.get("order", 0),
        visibility=doc["visibility"],
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class NoteLifecycle:
    """Owns note records and their cascading removal."""

    def __init__(
        self,
        permissions: PermissionResolver | None = None,
        activity: ActivityLog | None = None,
    ):
        self.activity = activity or ActivityLog()
        self.permissions = permissions or PermissionResolver(self.activity)

    async def _require_folder(
        self, tx: Transaction, folder_oid: ObjectId, owner_oid: ObjectId
    ) -> None:
        folder = await tx.folders.find_one({"_id": folder_oid}, {"owner_id": 1}, session=tx.session)
        if folder is None:
            raise NotFoundError("folder", str(folder_oid), ErrorCode.FOLDER_NOT_FOUND)
        if folder["owner_id"] != owner_oid:
            raise OwnershipError(str(folder_oid), str(owner_oid))

    async def create(
        self,
        tx: Transaction,
        title: str,
        content: str,
        owner_id: str,
        folder_id: str | None = None,
    ) -> str:
        """Insert a private note plus its owner permission and return the note id."""
        with tracer.start_as_current_span("notes.create") as span:
            owner_oid = to_object_id(owner_id, "user")
            folder_oid = optional_object_id(folder_id, "folder")
            span.set_attribute("user.id", str(owner_oid))

            if folder_oid is not None:
                await self._require_folder(tx, folder_oid, owner_oid)

            order = await next_order(
                tx, tx.notes, {"owner_id": owner_oid, "folder_id": folder_oid}
            )

            now = datetime.now(UTC)
            note_doc = {
                "title": title,
                "content": content,
                "owner_id": owner_oid,
                "folder_id": folder_oid,
                "order": order,
                "visibility": "private",
                "created_at": now,
                "updated_at": now,
            }
            result = await tx.notes.insert_one(note_doc, session=tx.session)
            note_id = str(result.inserted_id)

            await self.permissions.grant(tx, result.inserted_id, owner_oid, "owner")

            span.set_attribute("note.id", note_id)
            logger.info("note_created", note_id=note_id, owner_id=str(owner_oid), order=order)
            return note_id

    async def get(self, tx: Transaction, note_id: str) -> NoteResponse | None:
        doc = await tx.notes.find_one({"_id": to_object_id(note_id, "note")}, session=tx.session)
        return _doc_to_response(doc) if doc else None

    async def get_public(self, tx: Transaction, note_id: str) -> NoteResponse | None:
        """Read path for unauthenticated contexts: only public notes are returned."""
        note = await self.get(tx, note_id)
        if note is not None and note.visibility == "public":
            return note
        return None

    async def update(
        self,
        tx: Transaction,
        note_id: str,
        title: str | None = None,
        content: str | None = None,
        visibility: Visibility | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Patch the given fields and refresh ``updated_at``.

        No authorization happens here; callers check access first. Raises
        NotFoundError for a missing note. With ``actor_id`` an ``edit`` event
        naming the changed fields is logged.
        """
        with tracer.start_as_current_span("notes.update") as span:
            note_oid = to_object_id(note_id, "note")
            span.set_attribute("note.id", str(note_oid))

            updates: dict = {}
            if title is not None:
                updates["title"] = title
            if content is not None:
                updates["content"] = content
            if visibility is not None:
                updates["visibility"] = visibility
            changed_fields = sorted(updates)
            updates["updated_at"] = datetime.now(UTC)

            result = await tx.notes.update_one(
                {"_id": note_oid}, {"$set": updates}, session=tx.session
            )
            if result.matched_count == 0:
                logger.warning("note_update_not_found", note_id=str(note_oid))
                raise NotFoundError("note", str(note_oid))

            logger.info("note_updated", note_id=str(note_oid), fields=changed_fields)

            if actor_id is not None and changed_fields:
                await self.activity.log(
                    tx, note_oid, "edit", actor_id, EditMetadata(fields=changed_fields)
                )

    async def list_user_notes(self, tx: Transaction, user_id: str) -> list[NoteResponse]:
        """Notes the user owns or holds any permission on, most recently updated first."""
        with tracer.start_as_current_span("notes.list_user_notes") as span:
            user_oid = to_object_id(user_id, "user")
            span.set_attribute("user.id", str(user_oid))

            owned = await tx.notes.find({"owner_id": user_oid}, session=tx.session).to_list(
                length=None
            )
            permission_rows = await tx.note_permissions.find(
                {"user_id": user_oid}, {"note_id": 1}, session=tx.session
            ).to_list(length=None)

            by_id = {doc["_id"]: doc for doc in owned}
            shared_ids = {row["note_id"] for row in permission_rows} - by_id.keys()
            if shared_ids:
                shared = await tx.notes.find(
                    {"_id": {"$in": list(shared_ids)}}, session=tx.session
                ).to_list(length=None)
                by_id.update((doc["_id"], doc) for doc in shared)

            docs = sorted(
                by_id.values(), key=lambda doc: (doc["updated_at"], doc["_id"]), reverse=True
            )

            span.set_attribute("notes.count", len(docs))
            logger.debug("user_notes_listed", user_id=str(user_oid), count=len(docs))
            return [_doc_to_response(doc) for doc in docs]

    async def delete_note(self, tx: Transaction, note_id: str) -> CascadeResult:
        """Delete a note and everything whose lifecycle it owns.

        Permission rows, comment rows and activity events go first; the note
        row is removed last so that a visible note never has missing
        dependents.
        """
        with tracer.start_as_current_span("notes.delete_cascade") as span:
            note_oid = to_object_id(note_id, "note")
            span.set_attribute("note.id", str(note_oid))

            cascade = CascadeResult()
            cascade.permissions = await self.permissions.delete_for_note(tx, note_oid)
            comments = await tx.comments.delete_many({"note_id": note_oid}, session=tx.session)
            cascade.comments = comments.deleted_count
            cascade.activity_events = await self.activity.delete_for_note(tx, note_oid)
            note = await tx.notes.delete_one({"_id": note_oid}, session=tx.session)
            cascade.note = note.deleted_count

            get_app_metrics().note_cascade_deletes.add(1)
            logger.info(
                "note_deleted",
                note_id=str(note_oid),
                permissions=cascade.permissions,
                comments=cascade.comments,
                activity_events=cascade.activity_events,
                found=bool(cascade.note),
            )
            return cascade

    async def move_to_folder(
        self, tx: Transaction, note_id: str, folder_id: str | None = None
    ) -> None:
        """Place a note in a folder (or the root), appended after its new siblings.

        Missing note is a no-op; a missing or foreign target folder fails.
        """
        with tracer.start_as_current_span("notes.move_to_folder") as span:
            note_oid = to_object_id(note_id, "note")
            folder_oid = optional_object_id(folder_id, "folder")
            span.set_attribute("note.id", str(note_oid))

            note = await tx.notes.find_one({"_id": note_oid}, session=tx.session)
            if note is None:
                logger.debug("note_move_not_found", note_id=str(note_oid))
                return

            if folder_oid is not None:
                await self._require_folder(tx, folder_oid, note["owner_id"])

            order = await next_order(
                tx, tx.notes, {"owner_id": note["owner_id"], "folder_id": folder_oid}
            )
            await tx.notes.update_one(
                {"_id": note_oid},
                {"$set": {"folder_id": folder_oid, "order": order, "updated_at": datetime.now(UTC)}},
                session=tx.session,
            )
            logger.info(
                "note_moved",
                note_id=str(note_oid),
                folder_id=str(folder_oid) if folder_oid else None,
                order=order,
            )

    async def reorder(self, tx: Transaction, note_id: str, new_order: int) -> None:
        """Place a note at ``new_order`` among the notes of its folder."""
        with tracer.start_as_current_span("notes.reorder") as span:
            note_oid = to_object_id(note_id, "note")
            span.set_attribute("note.id", str(note_oid))

            note = await tx.notes.find_one({"_id": note_oid}, session=tx.session)
            if note is None:
                logger.debug("note_reorder_not_found", note_id=str(note_oid))
                return

            siblings = await load_siblings(
                tx, tx.notes, {"owner_id": note["owner_id"], "folder_id": note.get("folder_id")}
            )
            changed = await apply_reorder(tx, tx.notes, siblings, note_oid, new_order)
            logger.info(
                "note_reordered", note_id=str(note_oid), new_order=new_order, changed=changed
            )

    async def duplicate(self, tx: Transaction, note_id: str, owner_id: str) -> str:
        """Copy a note for ``owner_id``; logs a ``fork`` event on the original.

        The copy is appended to the end of its sibling group. It stays in the
        original's folder only when ``owner_id`` owns the original; anyone
        else's copy lands in their own root.
        """
        with tracer.start_as_current_span("notes.duplicate") as span:
            note_oid = to_object_id(note_id, "note")
            owner_oid = to_object_id(owner_id, "user")
            span.set_attribute("note.id", str(note_oid))

            original = await tx.notes.find_one({"_id": note_oid}, session=tx.session)
            if original is None:
                raise NotFoundError("note", str(note_oid))

            folder_oid = original.get("folder_id")
            if original["owner_id"] != owner_oid:
                folder_oid = None
            order = await next_order(
                tx, tx.notes, {"owner_id": owner_oid, "folder_id": folder_oid}
            )

            now = datetime.now(UTC)
            copy_doc = {
                "title": f"{original['title']} (Copy)",
                "content": original.get("content", ""),
                "owner_id": owner_oid,
                "folder_id": folder_oid,
                "order": order,
                "visibility": "private",
                "created_at": now,
                "updated_at": now,
            }
            result = await tx.notes.insert_one(copy_doc, session=tx.session)
            copy_id = str(result.inserted_id)

            await self.permissions.grant(tx, result.inserted_id, owner_oid, "owner")
            await self.activity.log(
                tx, note_oid, "fork", owner_oid, ForkMetadata(forked_note_id=copy_id)
            )

            span.set_attribute("note.copy_id", copy_id)
            logger.info("note_duplicated", note_id=str(note_oid), copy_id=copy_id)
            return copy_id
