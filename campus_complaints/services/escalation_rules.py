"""Escalation rule validation and persistence."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from fastapi import HTTPException, status
from sqlmodel import col

from campus_complaints.core.logging import get_logger
from campus_complaints.core.time import utcnow
from campus_complaints.models.complaints import COMPLAINT_CATEGORIES, COMPLAINT_PRIORITIES
from campus_complaints.models.escalation_rules import EscalationRule
from campus_complaints.models.users import HANDLER_ROLES, User

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

logger = get_logger(__name__)

MAX_HOURS_THRESHOLD = 8760
SHORT_THRESHOLD_HOURS = 2
LONG_THRESHOLD_HOURS = 720
# Advisory upper bounds per priority; exceeding them yields a warning only.
RECOMMENDED_MAX_HOURS = {"critical": 24, "high": 72, "medium": 168}
# Wildcard columns accept null; these do not.
NON_NULLABLE_RULE_FIELDS = ("hours_threshold", "escalate_to", "is_active")

CATEGORY_LABELS = {
    "academic": "Academic",
    "facilities": "Facilities",
    "harassment": "Harassment",
    "course_content": "Course Content",
    "administrative": "Administrative",
    "other": "Other",
}
PRIORITY_LABELS = {"low": "Low", "medium": "Medium", "high": "High", "critical": "Critical"}

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class RuleValidationIssue:
    """Single validation finding for a rule field."""

    field: str
    message: str
    severity: Severity = "error"


@dataclass
class RuleValidationResult:
    """Validation outcome; warnings never make a rule invalid."""

    issues: list[RuleValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def errors(self) -> list[RuleValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[RuleValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


@dataclass(frozen=True)
class RuleDraft:
    """Candidate rule values to validate before persisting."""

    category: str | None
    priority: str | None
    hours_threshold: float | None
    escalate_to: UUID | None
    is_active: bool = True


def validate_hours_threshold(
    hours: float | None,
    priority: str | None = None,
) -> list[RuleValidationIssue]:
    """Check the threshold is a whole number of hours within 1..8760."""
    if hours is None:
        return [RuleValidationIssue("hours_threshold", "Time threshold is required")]
    if not math.isfinite(hours):
        return [RuleValidationIssue("hours_threshold", "Time threshold must be a valid number")]
    if hours <= 0:
        return [RuleValidationIssue("hours_threshold", "Time threshold must be greater than 0")]
    if float(hours) != int(hours):
        return [RuleValidationIssue("hours_threshold", "Time threshold must be a whole number")]
    if hours > MAX_HOURS_THRESHOLD:
        return [
            RuleValidationIssue(
                "hours_threshold",
                f"Time threshold cannot exceed 1 year ({MAX_HOURS_THRESHOLD} hours)",
            ),
        ]
    recommended = RECOMMENDED_MAX_HOURS.get(priority or "")
    if recommended is not None and hours > recommended:
        return [
            RuleValidationIssue(
                "hours_threshold",
                f"{PRIORITY_LABELS[priority or '']} priority complaints typically require "
                f"faster escalation (recommended: <={recommended} hours)",
                "warning",
            ),
        ]
    return []


def validate_escalate_to(
    escalate_to: UUID | None,
    users: Iterable[User],
) -> list[RuleValidationIssue]:
    """Require an existing lecturer or admin as the escalation target."""
    if escalate_to is None:
        return [RuleValidationIssue("escalate_to", "Please select a user to escalate to")]
    user = next((candidate for candidate in users if candidate.id == escalate_to), None)
    if user is None:
        return [RuleValidationIssue("escalate_to", "Selected user does not exist")]
    if user.role not in HANDLER_ROLES:
        return [
            RuleValidationIssue(
                "escalate_to",
                "Complaints can only be escalated to lecturers or admins",
            ),
        ]
    return []


def validate_uniqueness(
    category: str | None,
    priority: str | None,
    existing_rules: Iterable[EscalationRule],
    *,
    current_rule_id: UUID | None = None,
) -> list[RuleValidationIssue]:
    """Allow at most one active rule per category/priority combination."""
    for rule in existing_rules:
        if (
            rule.is_active
            and rule.category == category
            and rule.priority == priority
            and rule.id != current_rule_id
        ):
            return [
                RuleValidationIssue(
                    "duplicate",
                    "An active escalation rule already exists for this category and "
                    "priority combination. Deactivate the existing rule first or choose "
                    "a different combination.",
                ),
            ]
    return []


def validate_logical_consistency(draft: RuleDraft) -> list[RuleValidationIssue]:
    issues: list[RuleValidationIssue] = []
    if not draft.is_active:
        issues.append(
            RuleValidationIssue(
                "is_active",
                "This rule is inactive and will not be applied to complaints until activated",
                "warning",
            ),
        )
    hours = draft.hours_threshold
    if hours and hours < SHORT_THRESHOLD_HOURS:
        issues.append(
            RuleValidationIssue(
                "hours_threshold",
                "Very short escalation thresholds (< 2 hours) may result in "
                "premature escalations",
                "warning",
            ),
        )
    if hours and hours > LONG_THRESHOLD_HOURS and draft.priority != "low":
        issues.append(
            RuleValidationIssue(
                "hours_threshold",
                "Very long escalation thresholds (> 30 days) may not be effective for "
                "non-low priority complaints",
                "warning",
            ),
        )
    return issues


def validate_rule(
    draft: RuleDraft,
    *,
    existing_rules: Iterable[EscalationRule] = (),
    users: Iterable[User] = (),
    current_rule_id: UUID | None = None,
) -> RuleValidationResult:
    """Validate a complete rule configuration.

    A null category or priority is accepted and acts as a wildcard.
    """
    issues: list[RuleValidationIssue] = []
    if draft.category is not None and draft.category not in COMPLAINT_CATEGORIES:
        issues.append(RuleValidationIssue("category", f"Unknown category: {draft.category}"))
    if draft.priority is not None and draft.priority not in COMPLAINT_PRIORITIES:
        issues.append(RuleValidationIssue("priority", f"Unknown priority: {draft.priority}"))
    issues.extend(validate_hours_threshold(draft.hours_threshold, draft.priority))
    issues.extend(validate_escalate_to(draft.escalate_to, users))
    if draft.is_active:
        issues.extend(
            validate_uniqueness(
                draft.category,
                draft.priority,
                existing_rules,
                current_rule_id=current_rule_id,
            ),
        )
    issues.extend(validate_logical_consistency(draft))
    return RuleValidationResult(issues=issues)


def format_threshold(hours: float) -> str:
    """Render a threshold like "3 hours", "2 days" or "1 day 6 hours"."""
    whole = int(hours)
    if whole < 24:
        return f"{whole} hour{'s' if whole != 1 else ''}"
    days, remaining = divmod(whole, 24)
    day_part = f"{days} day{'s' if days != 1 else ''}"
    if remaining == 0:
        return day_part
    return f"{day_part} {remaining} hour{'s' if remaining != 1 else ''}"


def describe_rule(rule: EscalationRule) -> str:
    category = CATEGORY_LABELS.get(rule.category, rule.category) if rule.category else "Any"
    priority = PRIORITY_LABELS.get(rule.priority, rule.priority) if rule.priority else "Any"
    return f"{category} / {priority} after {format_threshold(rule.hours_threshold)}"


async def validate_rule_in_store(
    session: AsyncSession,
    draft: RuleDraft,
    *,
    current_rule_id: UUID | None = None,
) -> RuleValidationResult:
    """Validate a draft against stored rules and users."""
    existing = await EscalationRule.objects.filter_by(is_active=True).all(session)
    users: list[User] = []
    if draft.escalate_to is not None:
        users = await User.objects.by_id(draft.escalate_to).all(session)
    return validate_rule(
        draft,
        existing_rules=existing,
        users=users,
        current_rule_id=current_rule_id,
    )


def _raise_if_invalid(result: RuleValidationResult) -> None:
    if result.is_valid:
        return
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=[
            {"field": issue.field, "message": issue.message, "severity": issue.severity}
            for issue in result.errors
        ],
    )


def rules_statement(*, is_active: bool | None = None) -> SelectOfScalar[EscalationRule]:
    """Statement listing rules newest first, optionally by activation state."""
    query = EscalationRule.objects.all()
    if is_active is not None:
        query = query.filter_by(is_active=is_active)
    return query.order_by(
        col(EscalationRule.created_at).desc(),
        col(EscalationRule.id),
    ).statement


async def get_rule_or_404(session: AsyncSession, rule_id: UUID) -> EscalationRule:
    rule = await EscalationRule.objects.by_id(rule_id).first(session)
    if rule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rule not found")
    return rule


async def create_rule(session: AsyncSession, draft: RuleDraft) -> EscalationRule:
    """Validate and persist a new escalation rule."""
    _raise_if_invalid(await validate_rule_in_store(session, draft))
    now = utcnow()
    rule = EscalationRule(
        category=draft.category,
        priority=draft.priority,
        hours_threshold=float(draft.hours_threshold or 0),
        escalate_to=draft.escalate_to,
        is_active=draft.is_active,
        created_at=now,
        updated_at=now,
    )
    session.add(rule)
    await session.commit()
    await session.refresh(rule)
    logger.info(
        "escalation_rule.created",
        extra={"rule_id": str(rule.id), "rule": describe_rule(rule)},
    )
    return rule


async def update_rule(
    session: AsyncSession,
    rule: EscalationRule,
    updates: dict[str, object],
) -> EscalationRule:
    """Apply partial updates after validating the resulting rule."""
    null_issues = [
        RuleValidationIssue(key, f"{key} cannot be null")
        for key in NON_NULLABLE_RULE_FIELDS
        if key in updates and updates[key] is None
    ]
    _raise_if_invalid(RuleValidationResult(issues=null_issues))
    merged = {
        "category": rule.category,
        "priority": rule.priority,
        "hours_threshold": rule.hours_threshold,
        "escalate_to": rule.escalate_to,
        "is_active": rule.is_active,
        **updates,
    }
    draft = RuleDraft(**merged)  # type: ignore[arg-type]
    _raise_if_invalid(await validate_rule_in_store(session, draft, current_rule_id=rule.id))
    for key, value in updates.items():
        setattr(rule, key, value)
    rule.updated_at = utcnow()
    session.add(rule)
    await session.commit()
    await session.refresh(rule)
    logger.info(
        "escalation_rule.updated",
        extra={"rule_id": str(rule.id), "fields": sorted(updates)},
    )
    return rule


async def set_rule_active(
    session: AsyncSession,
    rule: EscalationRule,
    *,
    is_active: bool,
) -> EscalationRule:
    return await update_rule(session, rule, {"is_active": is_active})


async def delete_rule(session: AsyncSession, rule: EscalationRule) -> None:
    rule_id = rule.id
    await session.delete(rule)
    await session.commit()
    logger.info("escalation_rule.deleted", extra={"rule_id": str(rule_id)})
