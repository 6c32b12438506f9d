"""Notes-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Visibility = Literal["private", "shared", "public"]


class NoteCreate(BaseModel):
    """Request model for creating a note."""

    title: str = Field(..., max_length=500)
    content: str = ""
    folder_id: str | None = None


class NoteUpdate(BaseModel):
    """Request model for partially updating a note."""

    title: str | None = Field(None, max_length=500)
    content: str | None = None
    visibility: Visibility | None = None


class NoteMove(BaseModel):
    """Request model for placing a note in a folder. ``None`` means root."""

    folder_id: str | None = None


class NoteReorder(BaseModel):
    """Request model for positioning a note within its folder."""

    new_order: int = Field(..., ge=0)


class NoteResponse(BaseModel):
    """Response model for note data."""

    id: str
    title: str
    content: str
    owner_id: str
    folder_id: str | None = None
    order: int = 0
    visibility: Visibility
    created_at: datetime
    updated_at: datetime


class NoteCreated(BaseModel):
    """Response model for mutations that return a new note id."""

    id: str
