"""Permission-related Pydantic models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

Role = Literal["owner", "editor", "viewer"]


class UserSummary(BaseModel):
    """Display fields of a user record joined onto another record."""

    name: str
    email: str


class PermissionGrant(BaseModel):
    """Request model for granting a role on a note."""

    user_id: str
    role: Role


class PermissionResponse(BaseModel):
    """A permission row joined with its grantee."""

    id: str
    note_id: str
    user_id: str
    role: Role
    user: UserSummary | None = None


class PermissionGranted(BaseModel):
    """Response model for a grant: the id of the upserted row."""

    id: str


class AccessCheck(BaseModel):
    """Effective access of one user on one note."""

    role: Role | None = None
    has_access: bool
