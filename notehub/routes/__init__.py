"""API route handlers organized by domain."""

from .activity import router as activity_router
from .folders import router as folders_router
from .health import router as health_router
from .notes import public_router as public_notes_router
from .notes import router as notes_router
from .permissions import router as permissions_router

__all__ = [
    "activity_router",
    "folders_router",
    "health_router",
    "notes_router",
    "permissions_router",
    "public_notes_router",
]
