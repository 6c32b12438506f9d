"""Notes endpoints.

Every note read or write is gated here with the permission resolver: reads
need any role, edits need owner or editor, and structural changes (delete,
placement) need the owner.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_current_user
from ..database import Transaction, get_transaction
from ..models import (
    AccessCheck,
    NoteCreate,
    NoteCreated,
    NoteMove,
    NoteReorder,
    NoteResponse,
    NoteUpdate,
)
from ..observability import get_tracer
from ..services import OWNER_ROLES, READ_ROLES, WRITE_ROLES
from .deps import note_lifecycle, permission_resolver

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer
tracer = get_tracer(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])
public_router = APIRouter(prefix="/public/notes", tags=["public"])


async def load_note(
    tx: Transaction, note_id: str, user_id: str, roles=READ_ROLES
) -> NoteResponse:
    """Fetch a note the caller may act on with one of ``roles``; 404 if missing."""
    note = await note_lifecycle.get(tx, note_id)
    if note is None:
        logger.warning("note_not_found", note_id=note_id, user_id=user_id)
        raise HTTPException(status_code=404, detail="Note not found")
    await permission_resolver.require(tx, note_id, user_id, roles)
    return note


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    note: NoteCreate,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """
    Create a private note owned by the caller.

    The owner permission row is written in the same transaction.
    """
    with tracer.start_as_current_span("create_note") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)

        logger.info("note_creation_attempt", user_id=user_id, title=note.title)
        note_id = await note_lifecycle.create(tx, note.title, note.content, user_id, note.folder_id)
        return await note_lifecycle.get(tx, note_id)


@router.get("", response_model=list[NoteResponse])
async def list_notes(
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Notes the caller owns or was granted, most recently updated first."""
    return await note_lifecycle.list_user_notes(tx, str(current_user["_id"]))


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    return await load_note(tx, note_id, str(current_user["_id"]))


@router.get("/{note_id}/access", response_model=AccessCheck)
async def get_my_access(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """The caller's effective role on a note."""
    return await permission_resolver.check(tx, note_id, str(current_user["_id"]))


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    note_update: NoteUpdate,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """
    Update a note.

    Supports partial updates - only provided fields will be updated.
    An ``edit`` activity event lists the changed fields.
    """
    with tracer.start_as_current_span("update_note") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)
        span.set_attribute("note.id", note_id)

        await load_note(tx, note_id, user_id, WRITE_ROLES)
        await note_lifecycle.update(
            tx,
            note_id,
            title=note_update.title,
            content=note_update.content,
            visibility=note_update.visibility,
            actor_id=user_id,
        )
        return await note_lifecycle.get(tx, note_id)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """
    Permanently delete a note.

    Removes its permissions, comments and activity events with it.
    """
    with tracer.start_as_current_span("delete_note") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("note.id", note_id)

        await load_note(tx, note_id, user_id, OWNER_ROLES)
        await note_lifecycle.delete_note(tx, note_id)


@router.post("/{note_id}/move", status_code=204)
async def move_note(
    note_id: str,
    move: NoteMove,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Place a note into one of the owner's folders, or the root."""
    await load_note(tx, note_id, str(current_user["_id"]), OWNER_ROLES)
    await note_lifecycle.move_to_folder(tx, note_id, move.folder_id)


@router.post("/{note_id}/reorder", status_code=204)
async def reorder_note(
    note_id: str,
    reorder: NoteReorder,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    await load_note(tx, note_id, str(current_user["_id"]), OWNER_ROLES)
    await note_lifecycle.reorder(tx, note_id, reorder.new_order)


@router.post("/{note_id}/duplicate", response_model=NoteCreated, status_code=201)
async def duplicate_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Fork a readable note into a private copy owned by the caller."""
    user_id = str(current_user["_id"])
    await load_note(tx, note_id, user_id)
    copy_id = await note_lifecycle.duplicate(tx, note_id, user_id)
    return NoteCreated(id=copy_id)


@public_router.get("/{note_id}", response_model=NoteResponse)
async def get_public_note(note_id: str, tx: Transaction = Depends(get_transaction)):
    """Unauthenticated read of a public note."""
    note = await note_lifecycle.get_public(tx, note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note
