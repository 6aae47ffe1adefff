# ruff: noqa: INP001
"""Pure matching and planning behavior of the escalation engine."""

from __future__ import annotations

from datetime import UTC, timedelta
from uuid import uuid4

import pytest

from campus_complaints.services.escalation_engine import (
    complaint_age_hours,
    effective_threshold_hours,
    is_candidate,
    matches_any,
    order_rules,
    plan_escalations,
    rule_matches,
)
from factories import NOW, make_complaint, make_rule


def test_complaint_older_than_threshold_matches() -> None:
    rule = make_rule(escalate_to=uuid4(), hours_threshold=2)
    assert rule_matches(rule, make_complaint(age_hours=3), NOW)


def test_complaint_younger_than_threshold_does_not_match() -> None:
    rule = make_rule(escalate_to=uuid4(), hours_threshold=2)
    assert not rule_matches(rule, make_complaint(age_hours=1), NOW)


def test_threshold_boundary_is_inclusive() -> None:
    rule = make_rule(escalate_to=uuid4(), hours_threshold=2)
    exactly = make_complaint(age_hours=2)
    just_under = make_complaint(age_hours=2 - 1 / 3600)
    assert rule_matches(rule, exactly, NOW)
    assert not rule_matches(rule, just_under, NOW)


def test_category_must_match_exactly() -> None:
    rule = make_rule(escalate_to=uuid4(), category="academic", hours_threshold=0)
    complaint = make_complaint(age_hours=10_000, category="facilities")
    assert not rule_matches(rule, complaint, NOW)


def test_priority_must_match_exactly() -> None:
    rule = make_rule(escalate_to=uuid4(), priority="high", hours_threshold=0)
    complaint = make_complaint(age_hours=100, priority="critical")
    assert not rule_matches(rule, complaint, NOW)


def test_null_rule_fields_match_any_value() -> None:
    assert matches_any(None)
    assert not matches_any("academic")
    rule = make_rule(escalate_to=uuid4(), category=None, priority=None, hours_threshold=1)
    for category, priority in (("facilities", "low"), ("harassment", "critical")):
        complaint = make_complaint(age_hours=5, category=category, priority=priority)
        assert rule_matches(rule, complaint, NOW)


def test_inactive_rule_never_matches() -> None:
    rule = make_rule(escalate_to=uuid4(), hours_threshold=0, is_active=False)
    assert not rule_matches(rule, make_complaint(age_hours=50), NOW)


def test_negative_threshold_reads_as_zero() -> None:
    rule = make_rule(escalate_to=uuid4(), hours_threshold=-5)
    assert effective_threshold_hours(rule) == 0.0
    assert rule_matches(rule, make_complaint(age_hours=0), NOW)


def test_age_accepts_timezone_aware_now() -> None:
    complaint = make_complaint(age_hours=4)
    aware_now = NOW.replace(tzinfo=UTC)
    assert complaint_age_hours(complaint, aware_now) == pytest.approx(4.0)


@pytest.mark.parametrize(
    ("status", "eligible"),
    [
        ("new", True),
        ("opened", True),
        ("draft", False),
        ("in_progress", False),
        ("resolved", False),
        ("closed", False),
        ("reopened", False),
    ],
)
def test_only_new_and_opened_complaints_are_candidates(status: str, eligible: bool) -> None:
    assert is_candidate(make_complaint(age_hours=10, status=status)) is eligible


def test_escalated_complaint_is_not_a_candidate() -> None:
    complaint = make_complaint(age_hours=10, escalated_at=NOW, escalation_level=1)
    assert not is_candidate(complaint)


def test_plan_skips_non_candidates_and_unmatched() -> None:
    handler = uuid4()
    rule = make_rule(escalate_to=handler, hours_threshold=2)
    complaints = [
        make_complaint(age_hours=3),
        make_complaint(age_hours=1),
        make_complaint(age_hours=3, status="in_progress"),
        make_complaint(age_hours=3, category="facilities"),
    ]

    plans, skipped = plan_escalations([rule], complaints, NOW)

    assert [plan.complaint_id for plan in plans] == [complaints[0].id]
    assert plans[0].escalate_to == handler
    assert plans[0].rule_id == rule.id
    assert plans[0].category == "academic"
    assert plans[0].priority == "high"
    assert skipped == 3


def test_first_created_rule_wins_when_several_match() -> None:
    older = make_rule(escalate_to=uuid4(), hours_threshold=10, created_at=NOW - timedelta(days=9))
    newer = make_rule(escalate_to=uuid4(), hours_threshold=1, created_at=NOW - timedelta(days=1))

    plans, _ = plan_escalations([newer, older], [make_complaint(age_hours=12)], NOW)

    assert plans[0].rule_id == older.id


def test_later_rule_applies_when_earlier_rule_threshold_not_reached() -> None:
    older = make_rule(escalate_to=uuid4(), hours_threshold=48, created_at=NOW - timedelta(days=9))
    newer = make_rule(escalate_to=uuid4(), hours_threshold=1, created_at=NOW - timedelta(days=1))

    plans, _ = plan_escalations([older, newer], [make_complaint(age_hours=5)], NOW)

    assert plans[0].rule_id == newer.id


def test_rule_order_breaks_created_at_ties_by_id() -> None:
    created = NOW - timedelta(days=2)
    rules = [make_rule(escalate_to=uuid4(), created_at=created) for _ in range(4)]
    ordered = order_rules(rules)
    assert [str(rule.id) for rule in ordered] == sorted(str(rule.id) for rule in rules)


def test_planning_does_not_mutate_inputs() -> None:
    complaint = make_complaint(age_hours=5)
    rule = make_rule(escalate_to=uuid4(), hours_threshold=1)

    plan_escalations([rule], [complaint], NOW)

    assert complaint.escalated_at is None
    assert complaint.escalation_level == 0
    assert complaint.assigned_to is None
