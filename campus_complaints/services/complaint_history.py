"""Complaint history logging service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from campus_complaints.core.time import utcnow
from campus_complaints.models.complaint_history import ComplaintHistory

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession


async def record_history(
    session: AsyncSession,
    *,
    complaint_id: UUID,
    action: str,
    actor_type: str,
    performed_by: UUID | None = None,
    old_value: str | None = None,
    new_value: str | None = None,
    details: dict[str, object] | None = None,
    commit: bool = True,
) -> ComplaintHistory:
    """Create an append-only complaint history entry."""
    entry = ComplaintHistory(
        complaint_id=complaint_id,
        action=action,
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
        actor_type=actor_type,
        details=details,
        created_at=utcnow(),
    )
    session.add(entry)
    if commit:
        await session.commit()
        await session.refresh(entry)
    return entry
