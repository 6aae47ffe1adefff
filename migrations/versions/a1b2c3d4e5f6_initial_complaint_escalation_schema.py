"""Initial schema: users, complaints, escalation rules, history, notifications.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("full_name", sa.String(), server_default="", nullable=False),
            sa.Column("role", sa.String(), server_default="student", nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_role", "users", ["role"])

    if "complaints" not in existing_tables:
        op.create_table(
            "complaints",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("student_id", sa.Uuid(), nullable=True),
            sa.Column("is_anonymous", sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("description", sa.String(), server_default="", nullable=False),
            sa.Column("category", sa.String(), nullable=False),
            sa.Column("priority", sa.String(), nullable=False),
            sa.Column("status", sa.String(), server_default="new", nullable=False),
            sa.Column("assigned_to", sa.Uuid(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.Column("escalated_at", sa.DateTime(), nullable=True),
            sa.Column("escalation_level", sa.Integer(), server_default="0", nullable=False),
            sa.CheckConstraint("escalation_level >= 0", name="ck_complaints_escalation_level"),
            sa.ForeignKeyConstraint(["student_id"], ["users.id"]),
            sa.ForeignKeyConstraint(["assigned_to"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_complaints_student_id", "complaints", ["student_id"])
        op.create_index("ix_complaints_category", "complaints", ["category"])
        op.create_index("ix_complaints_priority", "complaints", ["priority"])
        op.create_index("ix_complaints_status", "complaints", ["status"])
        op.create_index("ix_complaints_assigned_to", "complaints", ["assigned_to"])
        op.create_index("ix_complaints_created_at", "complaints", ["created_at"])
        op.create_index("ix_complaints_escalated_at", "complaints", ["escalated_at"])

    if "escalation_rules" not in existing_tables:
        op.create_table(
            "escalation_rules",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("category", sa.String(), nullable=True),
            sa.Column("priority", sa.String(), nullable=True),
            sa.Column("hours_threshold", sa.Float(), server_default="24", nullable=False),
            sa.Column("escalate_to", sa.Uuid(), nullable=False),
            sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["escalate_to"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_escalation_rules_category", "escalation_rules", ["category"])
        op.create_index("ix_escalation_rules_priority", "escalation_rules", ["priority"])
        op.create_index("ix_escalation_rules_escalate_to", "escalation_rules", ["escalate_to"])
        op.create_index("ix_escalation_rules_is_active", "escalation_rules", ["is_active"])

    if "complaint_history" not in existing_tables:
        op.create_table(
            "complaint_history",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("complaint_id", sa.Uuid(), nullable=False),
            sa.Column("action", sa.String(), nullable=False),
            sa.Column("old_value", sa.String(), nullable=True),
            sa.Column("new_value", sa.String(), nullable=True),
            sa.Column("performed_by", sa.Uuid(), nullable=True),
            sa.Column("actor_type", sa.String(), server_default="user", nullable=False),
            sa.Column("details", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["complaint_id"], ["complaints.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_complaint_history_complaint_id", "complaint_history", ["complaint_id"])
        op.create_index("ix_complaint_history_action", "complaint_history", ["action"])
        op.create_index("ix_complaint_history_performed_by", "complaint_history", ["performed_by"])
        op.create_index("ix_complaint_history_actor_type", "complaint_history", ["actor_type"])
        op.create_index("ix_complaint_history_created_at", "complaint_history", ["created_at"])

    if "notifications" not in existing_tables:
        op.create_table(
            "notifications",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("type", sa.String(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("message", sa.String(), server_default="", nullable=False),
            sa.Column("related_id", sa.Uuid(), nullable=True),
            sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
        op.create_index("ix_notifications_type", "notifications", ["type"])
        op.create_index("ix_notifications_related_id", "notifications", ["related_id"])
        op.create_index("ix_notifications_is_read", "notifications", ["is_read"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("complaint_history")
    op.drop_table("escalation_rules")
    op.drop_table("complaints")
    op.drop_table("users")
