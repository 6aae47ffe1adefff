"""Escalation rule model evaluated by the auto-escalation pass."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from campus_complaints.core.time import utcnow
from campus_complaints.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class EscalationRule(QueryModel, table=True):
    """Time-threshold rule reassigning aged complaints to a handler.

    A null `category` or `priority` matches any complaint value.
    """

    __tablename__ = "escalation_rules"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    category: str | None = Field(default=None, index=True)
    priority: str | None = Field(default=None, index=True)
    hours_threshold: float = Field(default=24)
    escalate_to: UUID = Field(foreign_key="users.id", index=True)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
