"""Schemas for escalation pass results."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (UUID,)


class RuleEscalationSummaryRead(SQLModel):
    """Per-rule breakdown of a pass."""

    rule_id: UUID
    complaints_escalated: int
    complaint_ids: list[UUID] = Field(default_factory=list)


class EscalationRunResponse(SQLModel):
    """Outcome of one auto-escalation pass."""

    message: str = Field(examples=["Successfully processed 2 rule(s) and escalated 3 complaint(s)"])
    matched: int = Field(default=0, description="Candidates that matched an active rule.")
    escalated: int = Field(default=0, description="Complaints escalated by this pass.")
    skipped: int = Field(
        default=0,
        description="Candidates that matched no rule or were no longer eligible at write time.",
    )
    failed: int = Field(default=0, description="Matched complaints whose update failed.")
    results: list[RuleEscalationSummaryRead] = Field(default_factory=list)
