"""Schemas for escalation rule management payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class EscalationRuleCreate(SQLModel):
    """Payload for creating an escalation rule; null category/priority means any."""

    category: str | None = None
    priority: str | None = None
    hours_threshold: float | None = Field(default=None, examples=[24])
    escalate_to: UUID | None = None
    is_active: bool = True


class EscalationRuleUpdate(SQLModel):
    """Partial update payload; only fields that are sent are applied."""

    category: str | None = None
    priority: str | None = None
    hours_threshold: float | None = None
    escalate_to: UUID | None = None
    is_active: bool | None = None


class EscalationRuleToggle(SQLModel):
    """Payload for activating or deactivating a rule."""

    is_active: bool


class EscalationRuleRead(SQLModel):
    """Escalation rule payload returned by read endpoints."""

    id: UUID
    category: str | None = None
    priority: str | None = None
    hours_threshold: float
    escalate_to: UUID
    is_active: bool
    description: str = ""
    created_at: datetime
    updated_at: datetime


class RuleValidationIssueRead(SQLModel):
    """Single validation finding."""

    field: str
    message: str
    severity: Literal["error", "warning"]


class RuleValidationResponse(SQLModel):
    """Dry-run validation result for a rule draft."""

    is_valid: bool
    errors: list[RuleValidationIssueRead] = Field(default_factory=list)
    warnings: list[RuleValidationIssueRead] = Field(default_factory=list)
