"""In-app notification model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from campus_complaints.core.time import utcnow
from campus_complaints.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Notification(QueryModel, table=True):
    """Notification addressed to a single user."""

    __tablename__ = "notifications"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    type: str = Field(index=True)
    title: str
    message: str = Field(default="")
    related_id: UUID | None = Field(default=None, index=True)
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
