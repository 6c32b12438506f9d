"""Sibling ordering shared by folders and notes.

Siblings are ranked by an integer ``order``. New and moved items are appended
after the current maximum; an explicit reorder compacts the whole group to a
dense ``0..n-1`` sequence. Gaps left by deletions are only closed by the next
reorder of that group.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from bson import ObjectId

from ..database import Transaction


async def load_siblings(tx: Transaction, collection, query: dict[str, Any]) -> list[dict]:
    """Fetch a sibling group sorted by ``order``; ties keep insertion order."""
    cursor = collection.find(query, session=tx.session).sort("_id", 1)
    docs = await cursor.to_list(length=None)
    return sorted(docs, key=lambda doc: doc.get("order", 0))


async def next_order(tx: Transaction, collection, query: dict[str, Any]) -> int:
    """Order value that places a new item after every existing sibling."""
    siblings = await collection.find(query, {"order": 1}, session=tx.session).to_list(length=None)
    if not siblings:
        return 0
    return max(doc.get("order", 0) for doc in siblings) + 1


def compute_reorder(siblings: list[dict], item_id: ObjectId, new_order: int) -> list[ObjectId] | None:
    """Return sibling ids in their new sequence, or None if the item is not a sibling.

    Indexes past the end append; negative indexes clamp to the front.
    """
    ids = [doc["_id"] for doc in siblings]
    if item_id not in ids:
        return None
    ids.remove(item_id)
    ids.insert(max(new_order, 0), item_id)
    return ids


async def apply_reorder(
    tx: Transaction, collection, siblings: list[dict], item_id: ObjectId, new_order: int
) -> int:
    """Move one item within its sibling group and rewrite changed ranks.

    Returns the number of documents whose ``order`` changed.
    """
    sequence = compute_reorder(siblings, item_id, new_order)
    if sequence is None:
        return 0

    current = {doc["_id"]: doc.get("order") for doc in siblings}
    now = datetime.now(UTC)
    changed = 0
    for index, doc_id in enumerate(sequence):
        if current[doc_id] != index:
            await collection.update_one(
                {"_id": doc_id},
                {"$set": {"order": index, "updated_at": now}},
                session=tx.session,
            )
            changed += 1
    return changed
