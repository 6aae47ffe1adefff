"""Auto-escalation engine for aged, unhandled complaints.

A pass reads a fresh snapshot of active rules and candidate complaints,
plans matches with pure functions, then applies each match as its own unit
of work: complaint update plus history row in one commit, followed by a
best-effort notification.

Matching contract:
- Candidates are complaints in an eligible status with no `escalated_at`.
- A rule's null `category` or `priority` matches any complaint value.
- A complaint qualifies once its age reaches the rule's threshold (negative
  thresholds count as zero).
- Rules are evaluated in creation order and the first qualifying rule wins.
- Escalated complaints stay out of later passes until `escalated_at` is
  explicitly reset, after which the next escalation bumps the level again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from campus_complaints.core.config import settings
from campus_complaints.core.logging import get_logger
from campus_complaints.core.time import as_naive_utc, utcnow
from campus_complaints.models.complaints import ESCALATION_ELIGIBLE_STATUSES, Complaint
from campus_complaints.models.escalation_rules import EscalationRule
from campus_complaints.services.complaint_history import record_history
from campus_complaints.services.notifications import (
    build_escalation_notification,
    send_notification,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

NO_ACTIVE_RULES_MESSAGE = "No active escalation rules"
UNASSIGNED = "unassigned"
_SECONDS_PER_HOUR = 3600

ApplyOutcome = Literal["escalated", "stale", "failed"]


@dataclass(frozen=True)
class EscalationPolicy:
    """Tunable behavior applied when a complaint is escalated."""

    status_on_escalation: str | None = None
    system_actor_id: UUID | None = None

    @classmethod
    def from_settings(cls) -> EscalationPolicy:
        return cls(
            status_on_escalation=settings.escalation_status_on_escalate,
            system_actor_id=settings.escalation_system_actor_id,
        )


@dataclass(frozen=True)
class EscalationPlan:
    """One planned (complaint, rule) escalation."""

    complaint_id: UUID
    rule_id: UUID
    escalate_to: UUID
    hours_threshold: float
    category: str
    priority: str


@dataclass
class RuleEscalationSummary:
    """Per-rule outcome of a pass."""

    rule_id: UUID
    complaints_escalated: int = 0
    complaint_ids: list[UUID] = field(default_factory=list)


@dataclass
class EscalationResult:
    """Aggregate outcome of one escalation pass."""

    message: str
    matched: int = 0
    escalated: int = 0
    skipped: int = 0
    failed: int = 0
    results: list[RuleEscalationSummary] = field(default_factory=list)


def matches_any(rule_value: str | None) -> bool:
    """Return whether a rule field is the "any value" wildcard."""
    return rule_value is None


def _field_matches(rule_value: str | None, complaint_value: str) -> bool:
    return matches_any(rule_value) or rule_value == complaint_value


def effective_threshold_hours(rule: EscalationRule) -> float:
    return max(0.0, float(rule.hours_threshold))


def complaint_age_hours(complaint: Complaint, now: datetime) -> float:
    elapsed = as_naive_utc(now) - as_naive_utc(complaint.created_at)
    return elapsed.total_seconds() / _SECONDS_PER_HOUR


def is_candidate(complaint: Complaint) -> bool:
    """Return whether a complaint may be picked up by a pass."""
    return complaint.status in ESCALATION_ELIGIBLE_STATUSES and complaint.escalated_at is None


def rule_matches(rule: EscalationRule, complaint: Complaint, now: datetime) -> bool:
    """Check category, priority, and age for a single rule."""
    if not rule.is_active:
        return False
    if not _field_matches(rule.category, complaint.category):
        return False
    if not _field_matches(rule.priority, complaint.priority):
        return False
    return complaint_age_hours(complaint, now) >= effective_threshold_hours(rule)


def order_rules(rules: Iterable[EscalationRule]) -> list[EscalationRule]:
    """Stable evaluation order: oldest rule first, id as tie-breaker."""
    return sorted(rules, key=lambda rule: (as_naive_utc(rule.created_at), str(rule.id)))


def select_rule(
    rules: Sequence[EscalationRule],
    complaint: Complaint,
    now: datetime,
) -> EscalationRule | None:
    """Return the first rule in `rules` that applies to the complaint."""
    for rule in rules:
        if rule_matches(rule, complaint, now):
            return rule
    return None


def plan_escalations(
    rules: Iterable[EscalationRule],
    complaints: Iterable[Complaint],
    now: datetime,
) -> tuple[list[EscalationPlan], int]:
    """Plan escalations for a snapshot; returns the plans and the skipped count.

    Pure: no I/O and no mutation of the given objects.
    """
    ordered = order_rules(rules)
    plans: list[EscalationPlan] = []
    skipped = 0
    for complaint in complaints:
        if not is_candidate(complaint):
            skipped += 1
            continue
        rule = select_rule(ordered, complaint, now)
        if rule is None:
            skipped += 1
            continue
        plans.append(
            EscalationPlan(
                complaint_id=complaint.id,
                rule_id=rule.id,
                escalate_to=rule.escalate_to,
                hours_threshold=effective_threshold_hours(rule),
                category=complaint.category,
                priority=complaint.priority,
            ),
        )
    return plans, skipped


async def _load_active_rules(session: AsyncSession) -> list[EscalationRule]:
    return await (
        EscalationRule.objects.filter_by(is_active=True)
        .order_by(col(EscalationRule.created_at), col(EscalationRule.id))
        .all(session)
    )


async def _load_candidates(session: AsyncSession) -> list[Complaint]:
    return await (
        Complaint.objects.filter(
            col(Complaint.status).in_(sorted(ESCALATION_ELIGIBLE_STATUSES)),
            col(Complaint.escalated_at).is_(None),
        )
        .order_by(col(Complaint.created_at), col(Complaint.id))
        .all(session)
    )


async def _apply_plan(
    session: AsyncSession,
    plan: EscalationPlan,
    *,
    now: datetime,
    policy: EscalationPolicy,
) -> ApplyOutcome:
    """Apply one planned escalation as an update + history unit."""
    try:
        # Re-read so a complaint reset or escalated since the snapshot is not
        # escalated twice.
        complaint = await session.get(
            Complaint,
            plan.complaint_id,
            populate_existing=True,
            with_for_update=True,
        )
        if complaint is None or not is_candidate(complaint):
            await session.rollback()
            logger.info(
                "escalation.complaint.stale",
                extra={"complaint_id": str(plan.complaint_id), "rule_id": str(plan.rule_id)},
            )
            return "stale"

        previous_assignee = complaint.assigned_to
        previous_status = complaint.status
        complaint.assigned_to = plan.escalate_to
        complaint.escalated_at = now
        complaint.escalation_level = (complaint.escalation_level or 0) + 1
        complaint.updated_at = now
        if policy.status_on_escalation and policy.status_on_escalation != previous_status:
            complaint.status = policy.status_on_escalation
        session.add(complaint)

        await record_history(
            session,
            complaint_id=complaint.id,
            action="escalated",
            actor_type="system",
            performed_by=policy.system_actor_id,
            old_value=str(previous_assignee) if previous_assignee else UNASSIGNED,
            new_value=str(plan.escalate_to),
            details={
                "rule_id": str(plan.rule_id),
                "hours_threshold": plan.hours_threshold,
                "category": plan.category,
                "priority": plan.priority,
                "escalation_level": complaint.escalation_level,
                "auto_escalated": True,
            },
            commit=False,
        )
        if complaint.status != previous_status:
            await record_history(
                session,
                complaint_id=complaint.id,
                action="status_changed",
                actor_type="system",
                performed_by=policy.system_actor_id,
                old_value=previous_status,
                new_value=complaint.status,
                details={"reason": "auto_escalation", "rule_id": str(plan.rule_id)},
                commit=False,
            )
        new_level = complaint.escalation_level
        notification = build_escalation_notification(complaint, user_id=plan.escalate_to)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception(
            "escalation.complaint.failed",
            extra={
                "complaint_id": str(plan.complaint_id),
                "rule_id": str(plan.rule_id),
                "error": str(exc),
            },
        )
        return "failed"

    logger.info(
        "escalation.complaint.escalated",
        extra={
            "complaint_id": str(plan.complaint_id),
            "rule_id": str(plan.rule_id),
            "escalate_to": str(plan.escalate_to),
            "escalation_level": new_level,
        },
    )
    await send_notification(session, notification)
    return "escalated"


async def run_escalation_pass(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    policy: EscalationPolicy | None = None,
) -> EscalationResult:
    """Evaluate all active rules against all candidates and escalate matches.

    Read failures propagate before any write. Per-complaint write failures are
    logged and counted in `failed` without aborting the pass.
    """
    pass_now = as_naive_utc(now) if now is not None else utcnow()
    effective_policy = policy or EscalationPolicy.from_settings()
    logger.info("escalation.pass.start", extra={"now": pass_now.isoformat()})

    rules = await _load_active_rules(session)
    if not rules:
        logger.info("escalation.pass.no_active_rules")
        return EscalationResult(message=NO_ACTIVE_RULES_MESSAGE)

    candidates = await _load_candidates(session)
    plans, skipped = plan_escalations(rules, candidates, pass_now)
    summaries = {rule.id: RuleEscalationSummary(rule_id=rule.id) for rule in rules}
    logger.info(
        "escalation.pass.planned",
        extra={
            "rule_count": len(rules),
            "candidate_count": len(candidates),
            "matched": len(plans),
        },
    )

    escalated = 0
    failed = 0
    for plan in plans:
        outcome = await _apply_plan(session, plan, now=pass_now, policy=effective_policy)
        if outcome == "escalated":
            escalated += 1
            summary = summaries[plan.rule_id]
            summary.complaints_escalated += 1
            summary.complaint_ids.append(plan.complaint_id)
        elif outcome == "stale":
            skipped += 1
        else:
            failed += 1

    result = EscalationResult(
        message=(
            f"Successfully processed {len(summaries)} rule(s) "
            f"and escalated {escalated} complaint(s)"
        ),
        matched=len(plans),
        escalated=escalated,
        skipped=skipped,
        failed=failed,
        results=list(summaries.values()),
    )
    logger.info(
        "escalation.pass.complete",
        extra={
            "matched": result.matched,
            "escalated": result.escalated,
            "skipped": result.skipped,
            "failed": result.failed,
        },
    )
    return result


async def reset_escalation(
    session: AsyncSession,
    *,
    complaint_id: UUID,
    performed_by: UUID | None = None,
    reason: str = "",
) -> Complaint:
    """Clear `escalated_at` so the next pass may escalate the complaint again.

    The escalation level is kept; the next escalation increments past it.
    """
    complaint = await Complaint.objects.by_id(complaint_id).first(session)
    if complaint is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Complaint not found",
        )
    if complaint.escalated_at is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Complaint is not currently escalated",
        )

    previous = complaint.escalated_at
    now = utcnow()
    complaint.escalated_at = None
    complaint.updated_at = now
    session.add(complaint)

    await record_history(
        session,
        complaint_id=complaint.id,
        action="escalation_reset",
        actor_type="user" if performed_by is not None else "system",
        performed_by=performed_by,
        old_value=previous.isoformat(),
        new_value=None,
        details={"escalation_level": complaint.escalation_level, "reason": reason},
        commit=False,
    )
    await session.commit()
    await session.refresh(complaint)
    logger.info(
        "escalation.complaint.reset",
        extra={
            "complaint_id": str(complaint.id),
            "escalation_level": complaint.escalation_level,
        },
    )
    return complaint
