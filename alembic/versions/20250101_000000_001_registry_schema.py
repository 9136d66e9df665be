"""Outcome registry schema.

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _engagement() -> list[sa.Column]:
    return [
        sa.Column("tracking_id", sa.String(64), nullable=True),
        sa.Column("open_count", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("click_count", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("first_clicked_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create registry tables."""

    # Clinic settings
    op.create_table(
        "clinic_settings",
        _id(),
        sa.Column("clinic_name", sa.String(200), nullable=False),
        sa.Column("tagline", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("logo_url", sa.String(500), nullable=True),
        sa.Column("referral_approval_email_subject", sa.String(255), nullable=True),
        sa.Column("referral_approval_email_template", sa.Text(), nullable=True),
        sa.Column("referral_decline_email_subject", sa.String(255), nullable=True),
        sa.Column("referral_decline_email_template", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_clinic_settings"),
    )

    # Staff profiles and roles
    op.create_table(
        "profiles",
        _id(),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("clinician_name", sa.String(200), nullable=True),
        sa.Column("npi", sa.String(20), nullable=True),
        sa.Column("clinic_id", postgresql.UUID(as_uuid=False), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.ForeignKeyConstraint(
            ["clinic_id"],
            ["clinic_settings.id"],
            name="fk_profiles_clinic_id_clinic_settings",
            ondelete="SET NULL",
        ),
    )

    op.create_table(
        "user_roles",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_user_roles"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["profiles.id"],
            name="fk_user_roles_user_id_profiles",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "patient_accounts",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_patient_accounts"),
    )
    op.create_index(
        "ix_patient_accounts_user_id", "patient_accounts", ["user_id"], unique=True
    )
    op.create_index("ix_patient_accounts_email", "patient_accounts", ["email"])

    # Leads
    op.create_table(
        "leads",
        _id(),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("system_category", sa.String(100), nullable=True),
        sa.Column("primary_concern", sa.Text(), nullable=True),
        sa.Column("symptom_summary", sa.Text(), nullable=True),
        sa.Column("who_is_this_for", sa.String(100), nullable=True),
        sa.Column("preferred_contact_method", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("checkpoint_status", sa.String(50), nullable=False),
        sa.Column("funnel_stage", sa.String(50), nullable=True),
        sa.Column("lead_status", sa.String(50), nullable=True),
        sa.Column("utm_source", sa.String(255), nullable=True),
        sa.Column("utm_medium", sa.String(255), nullable=True),
        sa.Column("utm_campaign", sa.String(255), nullable=True),
        sa.Column("utm_content", sa.String(255), nullable=True),
        sa.Column("origin_page", sa.String(500), nullable=True),
        sa.Column("origin_cta", sa.String(255), nullable=True),
        sa.Column("pillar_origin", sa.String(100), nullable=True),
        sa.Column("contact_attempt_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_contacted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_leads"),
    )
    op.create_index("ix_leads_email", "leads", ["email"])

    op.create_table(
        "lead_contact_attempts",
        _id(),
        sa.Column("lead_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("attempt_number", sa.Integer(), nullable=False),
        sa.Column("method", sa.String(30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("contacted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_lead_contact_attempts"),
        sa.ForeignKeyConstraint(
            ["lead_id"],
            ["leads.id"],
            name="fk_lead_contact_attempts_lead_id_leads",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_lead_contact_attempts_lead_id", "lead_contact_attempts", ["lead_id"]
    )

    # Episodes and outcome scores
    op.create_table(
        "episodes",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("episode_type", sa.String(30), nullable=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("clinician", sa.String(200), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("discharge_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_episodes"),
    )
    op.create_index("ix_episodes_user_id", "episodes", ["user_id"])

    op.create_table(
        "outcome_scores",
        _id(),
        sa.Column("episode_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("index_type", sa.String(20), nullable=False),
        sa.Column("score_type", sa.String(20), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_outcome_scores"),
        sa.ForeignKeyConstraint(
            ["episode_id"],
            ["episodes.id"],
            name="fk_outcome_scores_episode_id_episodes",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_outcome_scores_episode_id", "outcome_scores", ["episode_id"])

    # Tracked deliveries
    op.create_table(
        "comparison_report_deliveries",
        _id(),
        sa.Column("schedule_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("clinic_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("recipient_emails", sa.JSON(), nullable=False),
        sa.Column("export_names", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("delivery_details", sa.JSON(), nullable=True),
        *_engagement(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_comparison_report_deliveries"),
    )
    op.create_index(
        "ix_comparison_report_deliveries_schedule_id",
        "comparison_report_deliveries",
        ["schedule_id"],
    )
    op.create_index(
        "ix_comparison_report_deliveries_tracking_id",
        "comparison_report_deliveries",
        ["tracking_id"],
        unique=True,
    )

    op.create_table(
        "notifications_history",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("clinic_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("episode_id", sa.String(64), nullable=False),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("patient_email", sa.String(255), nullable=True),
        sa.Column("patient_phone", sa.String(30), nullable=True),
        sa.Column("clinician_name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("delivery_details", sa.JSON(), nullable=True),
        *_engagement(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_notifications_history"),
    )
    op.create_index(
        "ix_notifications_history_user_id", "notifications_history", ["user_id"]
    )
    op.create_index(
        "ix_notifications_history_episode_id", "notifications_history", ["episode_id"]
    )
    op.create_index(
        "ix_notifications_history_tracking_id",
        "notifications_history",
        ["tracking_id"],
        unique=True,
    )

    # Audit log
    op.create_table(
        "audit_logs",
        _id(),
        sa.Column("actor_type", sa.String(50), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("record_id", sa.String(64), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_record_id", "audit_logs", ["record_id"])


def downgrade() -> None:
    """Drop registry tables."""
    op.drop_table("audit_logs")
    op.drop_table("notifications_history")
    op.drop_table("comparison_report_deliveries")
    op.drop_table("outcome_scores")
    op.drop_table("episodes")
    op.drop_table("lead_contact_attempts")
    op.drop_table("leads")
    op.drop_table("patient_accounts")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_table("clinic_settings")
