"""Complaint model and its category/priority/status vocabularies."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from campus_complaints.core.time import utcnow
from campus_complaints.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

COMPLAINT_CATEGORIES = frozenset(
    {"academic", "facilities", "harassment", "course_content", "administrative", "other"},
)
COMPLAINT_PRIORITIES = frozenset({"low", "medium", "high", "critical"})
COMPLAINT_STATUSES = frozenset(
    {"draft", "new", "opened", "in_progress", "resolved", "closed", "reopened"},
)
# Only untouched complaints are candidates for auto-escalation.
ESCALATION_ELIGIBLE_STATUSES = frozenset({"new", "opened"})


class Complaint(QueryModel, table=True):
    """Student complaint tracked through triage, assignment, and escalation."""

    __tablename__ = "complaints"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    student_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    is_anonymous: bool = Field(default=False)
    title: str
    description: str = Field(default="")
    category: str = Field(index=True)
    priority: str = Field(index=True)
    status: str = Field(default="new", index=True)
    assigned_to: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    escalated_at: datetime | None = Field(default=None, index=True)
    escalation_level: int = Field(default=0, ge=0)
