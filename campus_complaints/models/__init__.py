"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from campus_complaints.models.complaint_history import ComplaintHistory
from campus_complaints.models.complaints import Complaint
from campus_complaints.models.escalation_rules import EscalationRule
from campus_complaints.models.notifications import Notification
from campus_complaints.models.users import User

__all__ = [
    "Complaint",
    "ComplaintHistory",
    "EscalationRule",
    "Notification",
    "User",
]
