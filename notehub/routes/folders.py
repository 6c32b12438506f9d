"""Folder tree endpoints.

Callers only ever see and change their own folders.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_current_user
from ..database import Transaction, get_transaction
from ..models import (
    FolderCreate,
    FolderMove,
    FolderPathEntry,
    FolderReorder,
    FolderResponse,
    FolderUpdate,
)
from ..observability import get_tracer
from .deps import folder_tree

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer
tracer = get_tracer(__name__)

router = APIRouter(prefix="/folders", tags=["folders"])


async def _owned_folder(
    tx: Transaction, folder_id: str, user_id: str, missing_ok: bool = False
) -> FolderResponse | None:
    """Load a folder owned by the caller.

    A folder owned by someone else is reported as not found. A missing folder
    raises 404 unless ``missing_ok``, in which case None is returned so the
    caller can treat the operation as a no-op.
    """
    folder = await folder_tree.get(tx, folder_id)
    if folder is None and missing_ok:
        return None
    if folder is None or folder.owner_id != user_id:
        logger.warning("folder_not_found_for_user", folder_id=folder_id, user_id=user_id)
        raise HTTPException(status_code=404, detail="Folder not found")
    return folder


@router.post("", response_model=FolderResponse, status_code=201)
async def create_folder(
    folder: FolderCreate,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Create a folder at the end of its sibling group."""
    with tracer.start_as_current_span("create_folder") as span:
        user_id = str(current_user["_id"])
        span.set_attribute("user.id", user_id)

        folder_id = await folder_tree.create(tx, folder.name, user_id, folder.parent_id)
        return await folder_tree.get(tx, folder_id)


@router.get("", response_model=list[FolderResponse])
async def list_folders(
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """List the caller's folders ordered by sibling rank."""
    return await folder_tree.list(tx, str(current_user["_id"]))


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(
    folder_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    return await _owned_folder(tx, folder_id, str(current_user["_id"]))


@router.get("/{folder_id}/path", response_model=list[FolderPathEntry])
async def get_folder_path(
    folder_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Breadcrumb from the root to the folder."""
    await _owned_folder(tx, folder_id, str(current_user["_id"]))
    return await folder_tree.get_path(tx, folder_id)


@router.patch("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: str,
    folder_update: FolderUpdate,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Rename a folder."""
    await _owned_folder(tx, folder_id, str(current_user["_id"]))
    await folder_tree.update(tx, folder_id, folder_update.name)
    return await folder_tree.get(tx, folder_id)


@router.post("/{folder_id}/move", status_code=204)
async def move_folder(
    folder_id: str,
    move: FolderMove,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Reparent a folder. Moving into itself or a descendant returns 409."""
    with tracer.start_as_current_span("move_folder") as span:
        span.set_attribute("folder.id", folder_id)
        if await _owned_folder(tx, folder_id, str(current_user["_id"]), missing_ok=True):
            await folder_tree.move(tx, folder_id, move.new_parent_id)


@router.post("/{folder_id}/reorder", status_code=204)
async def reorder_folder(
    folder_id: str,
    reorder: FolderReorder,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Position a folder among its siblings."""
    if await _owned_folder(tx, folder_id, str(current_user["_id"]), missing_ok=True):
        await folder_tree.reorder(tx, folder_id, reorder.new_order)


@router.delete("/{folder_id}", status_code=204)
async def delete_folder(
    folder_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Delete a folder; its children move up to its parent."""
    if await _owned_folder(tx, folder_id, str(current_user["_id"]), missing_ok=True):
        await folder_tree.delete_folder(tx, folder_id)
