"""User model for complaint handlers and submitters."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from campus_complaints.core.time import utcnow
from campus_complaints.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)
USER_ROLES = frozenset({"student", "lecturer", "admin"})
HANDLER_ROLES = frozenset({"lecturer", "admin"})


class User(QueryModel, table=True):
    """Application user; lecturers and admins can be escalation targets."""

    __tablename__ = "users"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: str = Field(default="")
    role: str = Field(default="student", index=True)  # student | lecturer | admin
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
