"""Folder-related Pydantic models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    """Request model for creating a folder."""

    name: str = Field(..., min_length=1, max_length=255)
    parent_id: str | None = None


class FolderUpdate(BaseModel):
    """Request model for renaming a folder."""

    name: str | None = Field(None, min_length=1, max_length=255)


class FolderMove(BaseModel):
    """Request model for reparenting a folder. ``None`` moves it to the root."""

    new_parent_id: str | None = None


class FolderReorder(BaseModel):
    """Request model for positioning a folder among its siblings."""

    new_order: int = Field(..., ge=0)


class FolderResponse(BaseModel):
    """Response model for folder data."""

    id: str
    name: str
    owner_id: str
    parent_id: str | None = None
    order: int
    created_at: datetime
    updated_at: datetime


class FolderPathEntry(BaseModel):
    """One step of the root-to-folder breadcrumb."""

    id: str
    name: str
