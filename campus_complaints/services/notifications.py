"""In-app notification writes for complaint workflow events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from campus_complaints.core.logging import get_logger
from campus_complaints.core.time import utcnow
from campus_complaints.models.notifications import Notification

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from campus_complaints.models.complaints import Complaint

logger = get_logger(__name__)

COMPLAINT_ESCALATED = "complaint_escalated"


def build_escalation_notification(
    complaint: Complaint,
    *,
    user_id: UUID,
) -> Notification:
    """Build the notification sent to the handler an escalation assigns."""
    return Notification(
        user_id=user_id,
        type=COMPLAINT_ESCALATED,
        title="Complaint Escalated",
        message=(
            f'Complaint "{complaint.title}" has been escalated to you '
            f"(level {complaint.escalation_level})."
        ),
        related_id=complaint.id,
        created_at=utcnow(),
    )


async def send_notification(
    session: AsyncSession,
    notification: Notification,
) -> bool:
    """Persist a notification; failures are logged and reported, never raised.

    Commits on its own so callers can run it after their primary write has
    already been committed.
    """
    try:
        session.add(notification)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.warning(
            "notification.insert_failed",
            extra={
                "type": notification.type,
                "user_id": str(notification.user_id),
                "related_id": str(notification.related_id),
                "error": str(exc),
            },
        )
        return False
    logger.info(
        "notification.created",
        extra={
            "type": notification.type,
            "user_id": str(notification.user_id),
            "related_id": str(notification.related_id),
        },
    )
    return True
