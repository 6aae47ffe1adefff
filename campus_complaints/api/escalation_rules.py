"""Escalation rule management endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from campus_complaints.core.auth import require_service_auth
from campus_complaints.db.pagination import paginate
from campus_complaints.db.session import get_session
from campus_complaints.models.escalation_rules import EscalationRule
from campus_complaints.schemas.escalation_rules import (
    EscalationRuleCreate,
    EscalationRuleRead,
    EscalationRuleToggle,
    EscalationRuleUpdate,
    RuleValidationIssueRead,
    RuleValidationResponse,
)
from campus_complaints.schemas.pagination import DefaultLimitOffsetPage
from campus_complaints.services.escalation_rules import (
    RuleDraft,
    create_rule,
    delete_rule,
    describe_rule,
    get_rule_or_404,
    rules_statement,
    set_rule_active,
    update_rule,
    validate_rule_in_store,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

    from campus_complaints.services.escalation_rules import RuleValidationIssue

router = APIRouter(
    prefix="/escalation-rules",
    tags=["escalation-rules"],
    dependencies=[Depends(require_service_auth)],
)
SESSION_DEP = Depends(get_session)


def _coerce_rule(item: object) -> EscalationRule:
    if not isinstance(item, EscalationRule):
        msg = "Expected EscalationRule items from paginated query"
        raise TypeError(msg)
    return item


def _rule_to_read(rule: EscalationRule) -> EscalationRuleRead:
    model = EscalationRuleRead.model_validate(rule, from_attributes=True)
    model.description = describe_rule(rule)
    return model


def _issue_to_read(issue: RuleValidationIssue) -> RuleValidationIssueRead:
    return RuleValidationIssueRead(
        field=issue.field,
        message=issue.message,
        severity=issue.severity,
    )


def _draft_from_payload(payload: EscalationRuleCreate) -> RuleDraft:
    return RuleDraft(
        category=payload.category,
        priority=payload.priority,
        hours_threshold=payload.hours_threshold,
        escalate_to=payload.escalate_to,
        is_active=payload.is_active,
    )


@router.get("", response_model=DefaultLimitOffsetPage[EscalationRuleRead])
async def list_escalation_rules(
    session: AsyncSession = SESSION_DEP,
    is_active: bool | None = None,
) -> LimitOffsetPage[EscalationRuleRead]:
    """List escalation rules, newest first."""

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [_rule_to_read(_coerce_rule(item)) for item in items]

    return await paginate(session, rules_statement(is_active=is_active), transformer=_transform)


@router.post("", response_model=EscalationRuleRead, status_code=status.HTTP_201_CREATED)
async def create_escalation_rule(
    payload: EscalationRuleCreate,
    session: AsyncSession = SESSION_DEP,
) -> EscalationRuleRead:
    """Create an escalation rule after validation."""
    rule = await create_rule(session, _draft_from_payload(payload))
    return _rule_to_read(rule)


@router.post("/validate", response_model=RuleValidationResponse)
async def validate_escalation_rule(
    payload: EscalationRuleCreate,
    session: AsyncSession = SESSION_DEP,
) -> RuleValidationResponse:
    """Validate a rule draft without persisting it."""
    result = await validate_rule_in_store(session, _draft_from_payload(payload))
    return RuleValidationResponse(
        is_valid=result.is_valid,
        errors=[_issue_to_read(issue) for issue in result.errors],
        warnings=[_issue_to_read(issue) for issue in result.warnings],
    )


@router.get("/{rule_id}", response_model=EscalationRuleRead)
async def get_escalation_rule(
    rule_id: UUID,
    session: AsyncSession = SESSION_DEP,
) -> EscalationRuleRead:
    """Get one escalation rule."""
    return _rule_to_read(await get_rule_or_404(session, rule_id))


@router.patch("/{rule_id}", response_model=EscalationRuleRead)
async def update_escalation_rule(
    rule_id: UUID,
    payload: EscalationRuleUpdate,
    session: AsyncSession = SESSION_DEP,
) -> EscalationRuleRead:
    """Apply a partial update to an escalation rule."""
    rule = await get_rule_or_404(session, rule_id)
    updates = payload.model_dump(exclude_unset=True)
    rule = await update_rule(session, rule, updates)
    return _rule_to_read(rule)


@router.post("/{rule_id}/toggle", response_model=EscalationRuleRead)
async def toggle_escalation_rule(
    rule_id: UUID,
    payload: EscalationRuleToggle,
    session: AsyncSession = SESSION_DEP,
) -> EscalationRuleRead:
    """Activate or deactivate an escalation rule."""
    rule = await get_rule_or_404(session, rule_id)
    rule = await set_rule_active(session, rule, is_active=payload.is_active)
    return _rule_to_read(rule)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_escalation_rule(
    rule_id: UUID,
    session: AsyncSession = SESSION_DEP,
) -> None:
    """Delete an escalation rule."""
    rule = await get_rule_or_404(session, rule_id)
    await delete_rule(session, rule)
