"""Pydantic models for API requests and responses."""

from .activity import (
    ActivityEntry,
    ActivityEvent,
    ActivityLogged,
    ActivityLogRequest,
    CollaboratorEntry,
    CommentEntry,
    CommentMetadata,
    EditEntry,
    EditMetadata,
    EventType,
    ForkEntry,
    ForkMetadata,
    PermissionEntry,
    PermissionMetadata,
    ResolveEntry,
    ResolveMetadata,
)
from .folders import FolderCreate, FolderMove, FolderPathEntry, FolderReorder, FolderResponse, FolderUpdate
from .notes import NoteCreate, NoteCreated, NoteMove, NoteReorder, NoteResponse, NoteUpdate, Visibility
from .permissions import (
    AccessCheck,
    PermissionGrant,
    PermissionGranted,
    PermissionResponse,
    Role,
    UserSummary,
)

__all__ = [
    # Permission models
    "AccessCheck",
    # Activity models
    "ActivityEntry",
    "ActivityEvent",
    "ActivityLogged",
    "ActivityLogRequest",
    "CollaboratorEntry",
    "CommentEntry",
    "CommentMetadata",
    "EditEntry",
    "EditMetadata",
    "EventType",
    # Folder models
    "FolderCreate",
    "FolderMove",
    "FolderPathEntry",
    "FolderReorder",
    "FolderResponse",
    "FolderUpdate",
    "ForkEntry",
    "ForkMetadata",
    # Note models
    "NoteCreate",
    "NoteCreated",
    "NoteMove",
    "NoteReorder",
    "NoteResponse",
    "NoteUpdate",
    "PermissionEntry",
    "PermissionGrant",
    "PermissionGranted",
    "PermissionMetadata",
    "PermissionResponse",
    "ResolveEntry",
    "ResolveMetadata",
    "Role",
    "UserSummary",
    "Visibility",
]
