"""Workspace and access-control services.

Every operation takes an explicit ``Transaction`` as its first argument.
"""

from .activity import ActivityLog
from .folders import FolderTree
from .notes import CascadeResult, NoteLifecycle
from .permissions import OWNER_ROLES, READ_ROLES, WRITE_ROLES, PermissionResolver

__all__ = [
    "OWNER_ROLES",
    "READ_ROLES",
    "WRITE_ROLES",
    "ActivityLog",
    "CascadeResult",
    "FolderTree",
    "NoteLifecycle",
    "PermissionResolver",
]
