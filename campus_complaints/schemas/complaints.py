"""Schemas for complaint escalation state and history."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class EscalationResetPayload(SQLModel):
    """Payload for clearing a complaint's escalation so it can escalate again."""

    performed_by: UUID | None = None
    reason: str = ""


class ComplaintEscalationRead(SQLModel):
    """Escalation-relevant view of a complaint."""

    id: UUID
    title: str
    category: str
    priority: str
    status: str
    assigned_to: UUID | None = None
    created_at: datetime
    updated_at: datetime
    escalated_at: datetime | None = None
    escalation_level: int


class ComplaintHistoryRead(SQLModel):
    """Complaint history entry returned by read endpoints."""

    id: UUID
    complaint_id: UUID
    action: str
    old_value: str | None = None
    new_value: str | None = None
    performed_by: UUID | None = None
    actor_type: str
    details: dict[str, object] | None = None
    created_at: datetime
