"""Read-only lookups against user records owned by the account service."""

from __future__ import annotations

from collections.abc import Iterable

from bson import ObjectId

from ..database import Transaction
from ..models import UserSummary


async def get_user_summaries(
    tx: Transaction, user_ids: Iterable[ObjectId]
) -> dict[ObjectId, UserSummary]:
    """Map user ids to their display fields. Missing users are simply absent."""
    ids = list(set(user_ids))
    if not ids:
        return {}

    cursor = tx.users.find({"_id": {"$in": ids}}, {"name": 1, "email": 1}, session=tx.session)
    summaries = {}
    async for user in cursor:
        summaries[user["_id"]] = UserSummary(name=user.get("name", ""), email=user.get("email", ""))
    return summaries
