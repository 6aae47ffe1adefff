"""Auto-escalation trigger and complaint escalation endpoints."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import col

from campus_complaints.core.auth import require_service_auth
from campus_complaints.core.logging import get_logger
from campus_complaints.db.pagination import paginate
from campus_complaints.db.session import get_session
from campus_complaints.models.complaint_history import ComplaintHistory
from campus_complaints.models.complaints import Complaint
from campus_complaints.schemas.complaints import (
    ComplaintEscalationRead,
    ComplaintHistoryRead,
    EscalationResetPayload,
)
from campus_complaints.schemas.errors import ErrorResponse
from campus_complaints.schemas.escalations import EscalationRunResponse
from campus_complaints.schemas.pagination import DefaultLimitOffsetPage
from campus_complaints.services.escalation_engine import reset_escalation, run_escalation_pass

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["escalations"], dependencies=[Depends(require_service_auth)])
SESSION_DEP = Depends(get_session)

# One pass at a time per process; overlapping triggers are rejected.
_PASS_LOCK = asyncio.Lock()


@router.post(
    "/auto-escalate-complaints",
    response_model=EscalationRunResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "Missing or invalid service token.",
        },
        status.HTTP_409_CONFLICT: {
            "model": ErrorResponse,
            "description": "Another escalation pass is still running.",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "An escalation pass is already running",
                        "request_id": "4f1c2a9e0b7d4c3e8a6f5d2b1c0e9f8a",
                    },
                },
            },
        },
    },
)
async def auto_escalate_complaints(
    session: AsyncSession = SESSION_DEP,
) -> EscalationRunResponse:
    """Run one auto-escalation pass over all open complaints."""
    if _PASS_LOCK.locked():
        logger.warning("escalation.trigger.rejected", extra={"reason": "pass_in_progress"})
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An escalation pass is already running",
        )
    async with _PASS_LOCK:
        result = await run_escalation_pass(session)
    return EscalationRunResponse.model_validate(asdict(result))


@router.post(
    "/complaints/{complaint_id}/reset-escalation",
    response_model=ComplaintEscalationRead,
)
async def reset_complaint_escalation(
    complaint_id: UUID,
    payload: EscalationResetPayload,
    session: AsyncSession = SESSION_DEP,
) -> ComplaintEscalationRead:
    """Clear a complaint's escalation so a later pass can escalate it again."""
    complaint = await reset_escalation(
        session,
        complaint_id=complaint_id,
        performed_by=payload.performed_by,
        reason=payload.reason,
    )
    return ComplaintEscalationRead.model_validate(complaint, from_attributes=True)


@router.get(
    "/complaints/{complaint_id}/history",
    response_model=DefaultLimitOffsetPage[ComplaintHistoryRead],
)
async def list_complaint_history(
    complaint_id: UUID,
    session: AsyncSession = SESSION_DEP,
    action: str | None = None,
) -> LimitOffsetPage[ComplaintHistoryRead]:
    """List history entries for a complaint, newest first."""
    complaint = await Complaint.objects.by_id(complaint_id).first(session)
    if complaint is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")

    query = ComplaintHistory.objects.filter_by(complaint_id=complaint_id)
    if action is not None:
        query = query.filter(col(ComplaintHistory.action) == action)
    statement = query.order_by(
        col(ComplaintHistory.created_at).desc(),
        col(ComplaintHistory.id),
    ).statement

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [ComplaintHistoryRead.model_validate(item, from_attributes=True) for item in items]

    return await paginate(session, statement, transformer=_transform)
