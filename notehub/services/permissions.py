"""Per-note roles and effective-access resolution.

Effective access follows a fixed precedence:

1. the note's owner is always ``owner``, whatever permission rows say;
2. otherwise an explicit permission row supplies the role;
3. otherwise a public note grants ``viewer``;
4. otherwise there is no access.
"""

from __future__ import annotations

from collections.abc import Collection

import structlog

from ..database import Transaction, to_object_id
from ..exceptions import AccessDeniedError, NotFoundError
from ..models import AccessCheck, PermissionMetadata, PermissionResponse, Role
from ..observability import get_app_metrics, get_tracer
from .activity import ActivityLog
from .users import get_user_summaries

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)

READ_ROLES: frozenset[str] = frozenset({"owner", "editor", "viewer"})
WRITE_ROLES: frozenset[str] = frozenset({"owner", "editor"})
OWNER_ROLES: frozenset[str] = frozenset({"owner"})


class PermissionResolver:
    """Grants, revokes and checks note roles."""

    def __init__(self, activity: ActivityLog | None = None):
        self.activity = activity or ActivityLog()

    async def grant(
        self,
        tx: Transaction,
        note_id: str,
        user_id: str,
        role: Role,
        actor_id: str | None = None,
    ) -> str:
        """Upsert the ``(note, user)`` row to ``role`` and return its id.

        Raises NotFoundError if the note does not exist. When ``actor_id`` is
        given a ``permission`` event is logged in the same transaction.
        """
        with tracer.start_as_current_span("permissions.grant") as span:
            note_oid = to_object_id(note_id, "note")
            user_oid = to_object_id(user_id, "user")
            span.set_attribute("note.id", str(note_oid))
            span.set_attribute("user.id", str(user_oid))
            span.set_attribute("permission.role", role)

            note = await tx.notes.find_one({"_id": note_oid}, {"_id": 1}, session=tx.session)
            if note is None:
                logger.warning("permission_grant_note_not_found", note_id=str(note_oid))
                raise NotFoundError("note", str(note_oid))

            existing = await tx.note_permissions.find_one(
                {"note_id": note_oid, "user_id": user_oid}, session=tx.session
            )
            if existing:
                await tx.note_permissions.update_one(
                    {"_id": existing["_id"]}, {"$set": {"role": role}}, session=tx.session
                )
                permission_id = str(existing["_id"])
                logger.info(
                    "permission_role_updated",
                    permission_id=permission_id,
                    note_id=str(note_oid),
                    user_id=str(user_oid),
                    old_role=existing["role"],
                    role=role,
                )
            else:
                result = await tx.note_permissions.insert_one(
                    {"note_id": note_oid, "user_id": user_oid, "role": role}, session=tx.session
                )
                permission_id = str(result.inserted_id)
                logger.info(
                    "permission_granted",
                    permission_id=permission_id,
                    note_id=str(note_oid),
                    user_id=str(user_oid),
                    role=role,
                )

            get_app_metrics().permission_changes.add(1, {"action": "grant"})

            if actor_id is not None:
                await self.activity.log(
                    tx,
                    note_oid,
                    "permission",
                    actor_id,
                    PermissionMetadata(action="grant", user_id=str(user_oid), role=role),
                )

            return permission_id

    async def revoke(
        self, tx: Transaction, note_id: str, user_id: str, actor_id: str | None = None
    ) -> None:
        """Delete the ``(note, user)`` row if present. Idempotent."""
        with tracer.start_as_current_span("permissions.revoke") as span:
            note_oid = to_object_id(note_id, "note")
            user_oid = to_object_id(user_id, "user")
            span.set_attribute("note.id", str(note_oid))
            span.set_attribute("user.id", str(user_oid))

            result = await tx.note_permissions.delete_one(
                {"note_id": note_oid, "user_id": user_oid}, session=tx.session
            )
            if result.deleted_count == 0:
                logger.debug("permission_revoke_noop", note_id=str(note_oid), user_id=str(user_oid))
                return

            logger.info("permission_revoked", note_id=str(note_oid), user_id=str(user_oid))
            get_app_metrics().permission_changes.add(1, {"action": "revoke"})

            if actor_id is not None:
                await self.activity.log(
                    tx,
                    note_oid,
                    "permission",
                    actor_id,
                    PermissionMetadata(action="revoke", user_id=str(user_oid)),
                )

    async def check(self, tx: Transaction, note_id: str, user_id: str) -> AccessCheck:
        """Resolve a user's effective role on a note."""
        with tracer.start_as_current_span("permissions.check") as span:
            note_oid = to_object_id(note_id, "note")
            user_oid = to_object_id(user_id, "user")
            span.set_attribute("note.id", str(note_oid))
            span.set_attribute("user.id", str(user_oid))

            note = await tx.notes.find_one(
                {"_id": note_oid}, {"owner_id": 1, "visibility": 1}, session=tx.session
            )
            if note and note["owner_id"] == user_oid:
                access = AccessCheck(role="owner", has_access=True)
            else:
                permission = await tx.note_permissions.find_one(
                    {"note_id": note_oid, "user_id": user_oid}, session=tx.session
                )
                if permission:
                    access = AccessCheck(role=permission["role"], has_access=True)
                elif note and note.get("visibility") == "public":
                    access = AccessCheck(role="viewer", has_access=True)
                else:
                    access = AccessCheck(role=None, has_access=False)

            span.set_attribute("permission.has_access", access.has_access)
            return access

    async def require(
        self, tx: Transaction, note_id: str, user_id: str, roles: Collection[str] = READ_ROLES
    ) -> AccessCheck:
        """Boundary check: raise AccessDeniedError unless the role is in ``roles``."""
        access = await self.check(tx, note_id, user_id)
        if not access.has_access or access.role not in roles:
            required = "owner" if set(roles) == OWNER_ROLES else "/".join(sorted(roles))
            logger.warning(
                "note_access_denied",
                note_id=str(note_id),
                user_id=str(user_id),
                role=access.role,
                required=required,
            )
            get_app_metrics().access_denials.add(1, {"required": required})
            raise AccessDeniedError(str(note_id), str(user_id), required)
        return access

    async def list(self, tx: Transaction, note_id: str) -> list[PermissionResponse]:
        """All permission rows of a note, each joined with its grantee."""
        with tracer.start_as_current_span("permissions.list") as span:
            note_oid = to_object_id(note_id, "note")
            span.set_attribute("note.id", str(note_oid))

            rows = await tx.note_permissions.find({"note_id": note_oid}, session=tx.session).to_list(
                length=None
            )
            users = await get_user_summaries(tx, (row["user_id"] for row in rows))

            return [
                PermissionResponse(
                    id=str(row["_id"]),
                    note_id=str(row["note_id"]),
                    user_id=str(row["user_id"]),
                    role=row["role"],
                    user=users.get(row["user_id"]),
                )
                for row in rows
            ]

    async def delete_for_note(self, tx: Transaction, note_id) -> int:
        """Remove every permission row of a note; part of the note delete cascade."""
        result = await tx.note_permissions.delete_many(
            {"note_id": to_object_id(note_id, "note")}, session=tx.session
        )
        return result.deleted_count
