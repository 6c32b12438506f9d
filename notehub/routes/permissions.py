"""Note sharing endpoints."""

import structlog
from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..database import Transaction, get_transaction
from ..models import AccessCheck, PermissionGrant, PermissionGranted, PermissionResponse
from ..observability import get_tracer
from ..services import OWNER_ROLES
from .deps import permission_resolver
from .notes import load_note

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer
tracer = get_tracer(__name__)

router = APIRouter(prefix="/notes/{note_id}/permissions", tags=["permissions"])


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Everyone holding a role on the note, with their name and email."""
    await load_note(tx, note_id, str(current_user["_id"]))
    return await permission_resolver.list(tx, note_id)


@router.put("", response_model=PermissionGranted)
async def grant_permission(
    note_id: str,
    grant: PermissionGrant,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Grant or change a user's role. Only the owner can share a note."""
    with tracer.start_as_current_span("grant_permission") as span:
        actor_id = str(current_user["_id"])
        span.set_attribute("note.id", note_id)
        span.set_attribute("permission.role", grant.role)

        await load_note(tx, note_id, actor_id, OWNER_ROLES)
        permission_id = await permission_resolver.grant(
            tx, note_id, grant.user_id, grant.role, actor_id=actor_id
        )
        return PermissionGranted(id=permission_id)


@router.get("/{user_id}", response_model=AccessCheck)
async def check_permission(
    note_id: str,
    user_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Effective access of ``user_id`` on the note."""
    await load_note(tx, note_id, str(current_user["_id"]))
    return await permission_resolver.check(tx, note_id, user_id)


@router.delete("/{user_id}", status_code=204)
async def revoke_permission(
    note_id: str,
    user_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Remove a user's role. Revoking a role that does not exist succeeds."""
    actor_id = str(current_user["_id"])
    await load_note(tx, note_id, actor_id, OWNER_ROLES)
    await permission_resolver.revoke(tx, note_id, user_id, actor_id=actor_id)
