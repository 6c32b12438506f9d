"""Folder tree management.

Folders form a per-owner forest. A folder's siblings are the folders that
share its ``(owner_id, parent_id)`` pair; ``parent_id`` of ``None`` is the
root. The tree is kept acyclic by checking ancestry whenever a folder is
moved, and deleting a folder promotes its direct children (folders and notes)
to the deleted folder's parent so nothing is orphaned.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog
from bson import ObjectId

from ..database import Transaction, optional_object_id, to_object_id
from ..exceptions import ErrorCode, FolderCycleError, NotFoundError, OwnershipError
from ..models import FolderPathEntry, FolderResponse
from ..observability import get_app_metrics, get_tracer
from .ordering import apply_reorder, load_siblings, next_order

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


def _doc_to_response(doc: dict) -> FolderResponse:
    return FolderResponse(
        id=str(doc["_id"]),
        name=doc["name"],
        owner_id=str(doc["owner_id"]),
        parent_id=str(doc["parent_id"]) if doc.get("parent_id") else None,
        order=doc.get("order", 0),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class FolderTree:
    """Creates, orders, moves and deletes folders."""

    async def _require_parent(
        self, tx: Transaction, parent_oid: ObjectId, owner_oid: ObjectId
    ) -> dict:
        """Load a prospective parent folder; it must exist and share the owner."""
        parent = await tx.folders.find_one({"_id": parent_oid}, session=tx.session)
        if parent is None:
            raise NotFoundError("folder", str(parent_oid), ErrorCode.PARENT_FOLDER_NOT_FOUND)
        if parent["owner_id"] != owner_oid:
            raise OwnershipError(str(parent_oid), str(owner_oid))
        return parent

    async def create(
        self, tx: Transaction, name: str, owner_id: str, parent_id: str | None = None
    ) -> str:
        """Create a folder at the end of its sibling group and return its id."""
        with tracer.start_as_current_span("folders.create") as span:
            owner_oid = to_object_id(owner_id, "user")
            parent_oid = optional_object_id(parent_id, "folder")
            span.set_attribute("user.id", str(owner_oid))

            if parent_oid is not None:
                await self._require_parent(tx, parent_oid, owner_oid)

            order = await next_order(
                tx, tx.folders, {"owner_id": owner_oid, "parent_id": parent_oid}
            )

            now = datetime.now(UTC)
            folder_doc = {
                "name": name,
                "owner_id": owner_oid,
                "parent_id": parent_oid,
                "order": order,
                "created_at": now,
                "updated_at": now,
            }
            result = await tx.folders.insert_one(folder_doc, session=tx.session)
            folder_id = str(result.inserted_id)

            span.set_attribute("folder.id", folder_id)
            logger.info(
                "folder_created",
                folder_id=folder_id,
                owner_id=str(owner_oid),
                parent_id=str(parent_oid) if parent_oid else None,
                order=order,
            )
            return folder_id

    async def get(self, tx: Transaction, folder_id: str) -> FolderResponse | None:
        doc = await tx.folders.find_one(
            {"_id": to_object_id(folder_id, "folder")}, session=tx.session
        )
        return _doc_to_response(doc) if doc else None

    async def list(self, tx: Transaction, user_id: str) -> list[FolderResponse]:
        """All folders owned by a user, ascending by ``order``."""
        with tracer.start_as_current_span("folders.list") as span:
            owner_oid = to_object_id(user_id, "user")
            span.set_attribute("user.id", str(owner_oid))

            docs = await load_siblings(tx, tx.folders, {"owner_id": owner_oid})
            span.set_attribute("folders.count", len(docs))
            return [_doc_to_response(doc) for doc in docs]

    async def update(self, tx: Transaction, folder_id: str, name: str | None = None) -> None:
        """Rename a folder. The folder must exist."""
        with tracer.start_as_current_span("folders.update") as span:
            folder_oid = to_object_id(folder_id, "folder")
            span.set_attribute("folder.id", str(folder_oid))

            updates = {"updated_at": datetime.now(UTC)}
            if name is not None:
                updates["name"] = name

            result = await tx.folders.update_one(
                {"_id": folder_oid}, {"$set": updates}, session=tx.session
            )
            if result.matched_count == 0:
                logger.warning("folder_update_not_found", folder_id=str(folder_oid))
                raise NotFoundError("folder", str(folder_oid))

            logger.info("folder_updated", folder_id=str(folder_oid), renamed=name is not None)

    async def move(
        self, tx: Transaction, folder_id: str, new_parent_id: str | None = None
    ) -> None:
        """Reparent a folder, appending it to its new sibling group.

        Raises FolderCycleError, leaving everything untouched, when the new
        parent is the folder itself or one of its descendants. Moving a
        missing folder is a no-op.
        """
        with tracer.start_as_current_span("folders.move") as span:
            folder_oid = to_object_id(folder_id, "folder")
            parent_oid = optional_object_id(new_parent_id, "folder")
            span.set_attribute("folder.id", str(folder_oid))

            folder = await tx.folders.find_one({"_id": folder_oid}, session=tx.session)
            if folder is None:
                logger.debug("folder_move_not_found", folder_id=str(folder_oid))
                return

            if parent_oid is not None:
                await self._check_not_descendant(tx, folder_oid, parent_oid)
                await self._require_parent(tx, parent_oid, folder["owner_id"])

            order = await next_order(
                tx, tx.folders, {"owner_id": folder["owner_id"], "parent_id": parent_oid}
            )
            await tx.folders.update_one(
                {"_id": folder_oid},
                {"$set": {"parent_id": parent_oid, "order": order, "updated_at": datetime.now(UTC)}},
                session=tx.session,
            )

            get_app_metrics().folder_moves.add(1)
            logger.info(
                "folder_moved",
                folder_id=str(folder_oid),
                old_parent_id=str(folder["parent_id"]) if folder.get("parent_id") else None,
                new_parent_id=str(parent_oid) if parent_oid else None,
                order=order,
            )

    async def _check_not_descendant(
        self, tx: Transaction, folder_oid: ObjectId, parent_oid: ObjectId
    ) -> None:
        """Walk up from ``parent_oid``; reaching ``folder_oid`` means a cycle."""
        seen: set[ObjectId] = set()
        current = parent_oid
        while current is not None and current not in seen:
            if current == folder_oid:
                get_app_metrics().folder_cycle_rejections.add(1)
                logger.warning(
                    "folder_move_rejected_cycle",
                    folder_id=str(folder_oid),
                    new_parent_id=str(parent_oid),
                )
                raise FolderCycleError(str(folder_oid), str(parent_oid))
            seen.add(current)
            ancestor = await tx.folders.find_one(
                {"_id": current}, {"parent_id": 1}, session=tx.session
            )
            if ancestor is None:
                break
            current = ancestor.get("parent_id")

    async def reorder(self, tx: Transaction, folder_id: str, new_order: int) -> None:
        """Place a folder at ``new_order`` within its current sibling group.

        Every sibling is renumbered densely from 0. Missing folder is a no-op.
        """
        with tracer.start_as_current_span("folders.reorder") as span:
            folder_oid = to_object_id(folder_id, "folder")
            span.set_attribute("folder.id", str(folder_oid))
            span.set_attribute("folder.new_order", new_order)

            folder = await tx.folders.find_one({"_id": folder_oid}, session=tx.session)
            if folder is None:
                logger.debug("folder_reorder_not_found", folder_id=str(folder_oid))
                return

            siblings = await load_siblings(
                tx,
                tx.folders,
                {"owner_id": folder["owner_id"], "parent_id": folder.get("parent_id")},
            )
            changed = await apply_reorder(tx, tx.folders, siblings, folder_oid, new_order)

            logger.info(
                "folder_reordered",
                folder_id=str(folder_oid),
                new_order=new_order,
                siblings=len(siblings),
                changed=changed,
            )

    async def delete_folder(self, tx: Transaction, folder_id: str) -> None:
        """Delete a folder, promoting its direct children to its parent.

        Child folders keep their own subtrees. Sibling ``order`` values are
        not compacted. Deleting a missing folder is a no-op.
        """
        with tracer.start_as_current_span("folders.delete") as span:
            folder_oid = to_object_id(folder_id, "folder")
            span.set_attribute("folder.id", str(folder_oid))

            folder = await tx.folders.find_one({"_id": folder_oid}, session=tx.session)
            if folder is None:
                logger.debug("folder_delete_not_found", folder_id=str(folder_oid))
                return

            new_parent = folder.get("parent_id")
            now = datetime.now(UTC)

            folders_result = await tx.folders.update_many(
                {"parent_id": folder_oid},
                {"$set": {"parent_id": new_parent, "updated_at": now}},
                session=tx.session,
            )
            notes_result = await tx.notes.update_many(
                {"folder_id": folder_oid},
                {"$set": {"folder_id": new_parent, "updated_at": now}},
                session=tx.session,
            )
            await tx.folders.delete_one({"_id": folder_oid}, session=tx.session)

            logger.info(
                "folder_deleted",
                folder_id=str(folder_oid),
                promoted_folders=folders_result.modified_count,
                promoted_notes=notes_result.modified_count,
                new_parent_id=str(new_parent) if new_parent else None,
            )

    async def get_path(self, tx: Transaction, folder_id: str) -> list[FolderPathEntry]:
        """Breadcrumb from the root down to ``folder_id`` inclusive.

        A dangling parent reference truncates the path instead of failing.
        """
        with tracer.start_as_current_span("folders.get_path") as span:
            path: list[FolderPathEntry] = []
            seen: set[ObjectId] = set()
            current = to_object_id(folder_id, "folder")
            span.set_attribute("folder.id", str(current))

            while current is not None and current not in seen:
                seen.add(current)
                folder = await tx.folders.find_one(
                    {"_id": current}, {"name": 1, "parent_id": 1}, session=tx.session
                )
                if folder is None:
                    break
                path.insert(0, FolderPathEntry(id=str(folder["_id"]), name=folder["name"]))
                current = folder.get("parent_id")

            span.set_attribute("folder.depth", len(path))
            return path
