"""Activity log Pydantic models.

Each event type carries its own metadata structure. Entries are a tagged
union keyed by ``type``; unknown metadata keys are kept as-is so callers can
attach extra context without a schema change.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter

from .permissions import Role, UserSummary

EventType = Literal["edit", "comment", "resolve", "fork", "permission"]


class _Metadata(BaseModel):
    model_config = ConfigDict(extra="allow")


class EditMetadata(_Metadata):
    """Which note fields an edit touched."""

    fields: list[str] | None = None


class CommentMetadata(_Metadata):
    comment_id: str | None = None
    line_number: int | None = None


class ResolveMetadata(_Metadata):
    comment_id: str | None = None
    resolved: bool | None = None


class ForkMetadata(_Metadata):
    """Links the source note to the copy made from it."""

    forked_note_id: str | None = None


class PermissionMetadata(_Metadata):
    action: Literal["grant", "revoke"] | None = None
    user_id: str | None = None
    role: Role | None = None


class EditEntry(BaseModel):
    type: Literal["edit"] = "edit"
    metadata: EditMetadata = Field(default_factory=EditMetadata)


class CommentEntry(BaseModel):
    type: Literal["comment"] = "comment"
    metadata: CommentMetadata = Field(default_factory=CommentMetadata)


class ResolveEntry(BaseModel):
    type: Literal["resolve"] = "resolve"
    metadata: ResolveMetadata = Field(default_factory=ResolveMetadata)


class ForkEntry(BaseModel):
    type: Literal["fork"] = "fork"
    metadata: ForkMetadata = Field(default_factory=ForkMetadata)


class PermissionEntry(BaseModel):
    type: Literal["permission"] = "permission"
    metadata: PermissionMetadata = Field(default_factory=PermissionMetadata)


ActivityEntry = Annotated[
    Union[EditEntry, CommentEntry, ResolveEntry, ForkEntry, PermissionEntry],
    Field(discriminator="type"),
]


class EventRecord(BaseModel):
    """Stored fields shared by every event, plus the joined actor."""

    id: str
    note_id: str
    actor_id: str
    created_at: datetime
    actor: UserSummary | None = None


class EditEvent(EventRecord, EditEntry):
    pass


class CommentEvent(EventRecord, CommentEntry):
    pass


class ResolveEvent(EventRecord, ResolveEntry):
    pass


class ForkEvent(EventRecord, ForkEntry):
    pass


class PermissionEvent(EventRecord, PermissionEntry):
    pass


ActivityEvent = Annotated[
    Union[EditEvent, CommentEvent, ResolveEvent, ForkEvent, PermissionEvent],
    Field(discriminator="type"),
]


CollaboratorEntry = Annotated[Union[CommentEntry, ResolveEntry], Field(discriminator="type")]


class ActivityLogRequest(RootModel[CollaboratorEntry]):
    """Request body for an event reported by the comment service.

    Only ``comment`` and ``resolve`` are accepted; ``edit``, ``fork`` and
    ``permission`` events are written by the services that make those changes.
    """


activity_entry_adapter: TypeAdapter[ActivityEntry] = TypeAdapter(ActivityEntry)
activity_event_adapter: TypeAdapter[ActivityEvent] = TypeAdapter(ActivityEvent)


class ActivityLogged(BaseModel):
    """Response model for a logged event: the new event id."""

    id: str
