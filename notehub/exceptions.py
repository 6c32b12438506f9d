"""Exception hierarchy for the notehub workspace engine.

Every failure surfaces to the caller as a typed exception carrying an
``ErrorCode``. The transaction wrapping the call is discarded when one of
these propagates, so no partial effects are ever visible.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Lookup errors (1xxx)
    FOLDER_NOT_FOUND = 1001
    NOTE_NOT_FOUND = 1002
    PARENT_FOLDER_NOT_FOUND = 1003

    # Structural integrity (2xxx)
    FOLDER_CYCLE = 2001
    CROSS_OWNER_FOLDER = 2002

    # Authorization (3xxx)
    ACCESS_DENIED = 3001

    # Validation (4xxx)
    INVALID_ID = 4001


class NotehubError(Exception):
    """Base exception for all notehub errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "detail": self.message,
            "code": self.code.name,
            "details": self.details,
        }


class NotFoundError(NotehubError):
    """A record that the operation requires does not exist."""

    status_code = 404

    def __init__(self, kind: str, record_id: str, code: ErrorCode | None = None):
        if code is None:
            code = ErrorCode.NOTE_NOT_FOUND if kind == "note" else ErrorCode.FOLDER_NOT_FOUND
        super().__init__(
            f"{kind.capitalize()} not found", code, {"kind": kind, "id": record_id}
        )
        self.kind = kind
        self.record_id = record_id


class FolderCycleError(NotehubError):
    """Moving a folder under itself or one of its descendants."""

    status_code = 409

    def __init__(self, folder_id: str, new_parent_id: str):
        super().__init__(
            "Cannot move folder into itself or its descendants",
            ErrorCode.FOLDER_CYCLE,
            {"folder_id": folder_id, "new_parent_id": new_parent_id},
        )


class OwnershipError(NotehubError):
    """A folder reference crosses owners."""

    status_code = 409

    def __init__(self, folder_id: str, owner_id: str):
        super().__init__(
            "Folder belongs to another owner",
            ErrorCode.CROSS_OWNER_FOLDER,
            {"folder_id": folder_id, "owner_id": owner_id},
        )


class AccessDeniedError(NotehubError):
    """The caller's effective role does not allow the operation."""

    status_code = 403

    def __init__(self, note_id: str, user_id: str, required: str):
        super().__init__(
            "You don't have permission to perform this action on this note",
            ErrorCode.ACCESS_DENIED,
            {"note_id": note_id, "user_id": user_id, "required": required},
        )


class InvalidIdError(NotehubError):
    """An identifier is not a valid ObjectId."""

    status_code = 400

    def __init__(self, kind: str, value: str):
        super().__init__(
            f"Invalid {kind} ID format", ErrorCode.INVALID_ID, {"kind": kind, "value": value}
        )
