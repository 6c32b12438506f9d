"""Note activity log endpoints."""

import structlog
from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..database import Transaction, get_transaction
from ..models import ActivityEvent, ActivityLogged, ActivityLogRequest
from .deps import activity_log
from .notes import load_note

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/notes/{note_id}/activity", tags=["activity"])


@router.get("", response_model=list[ActivityEvent])
async def get_note_activity(
    note_id: str,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Events for a note, newest first."""
    await load_note(tx, note_id, str(current_user["_id"]))
    return await activity_log.get_note_activity(tx, note_id)


@router.post("", response_model=ActivityLogged, status_code=201)
async def log_activity(
    note_id: str,
    request: ActivityLogRequest,
    current_user: dict = Depends(get_current_user),
    tx: Transaction = Depends(get_transaction),
):
    """Record a comment or resolution made by the caller.

    Other event types are rejected with 422: they are only written alongside
    the change they describe.
    """
    actor_id = str(current_user["_id"])
    await load_note(tx, note_id, actor_id)
    entry = request.root
    event_id = await activity_log.log(tx, note_id, entry.type, actor_id, entry.metadata)
    return ActivityLogged(id=event_id)
