"""Append-only complaint history model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field

from campus_complaints.core.time import utcnow
from campus_complaints.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)
HISTORY_ACTIONS = frozenset(
    {
        "created",
        "status_changed",
        "assigned",
        "reassigned",
        "feedback_added",
        "comment_added",
        "reopened",
        "escalated",
        "escalation_reset",
        "rated",
        "tags_added",
    },
)


class ComplaintHistory(QueryModel, table=True):
    """Append-only record of a state-changing action on a complaint."""

    __tablename__ = "complaint_history"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    complaint_id: UUID = Field(foreign_key="complaints.id", index=True)
    action: str = Field(index=True)
    old_value: str | None = None
    new_value: str | None = None
    performed_by: UUID | None = Field(default=None, index=True)
    actor_type: str = Field(default="user", index=True)  # system | user
    details: dict[str, object] | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)
