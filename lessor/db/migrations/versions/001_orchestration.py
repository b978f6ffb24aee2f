"""Create orchestration tables.

Revision ID: 001_orchestration
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_orchestration"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _timestamp(name: str, nullable: bool = True, default_now: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=sa.text("CURRENT_TIMESTAMP") if default_now else None,
    )


def upgrade() -> None:
    """Create leads, agents, tasks, credentials, provider health, and activity tables."""
    op.create_table(
        "leads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        _uuid("organization_id"),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("do_not_contact", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("sms_consent", sa.Boolean, nullable=False, server_default="false"),
        _timestamp("sms_consent_at"),
        sa.Column("call_consent", sa.Boolean, nullable=False, server_default="false"),
        _timestamp("call_consent_at"),
        sa.Column("is_human_controlled", sa.Boolean, nullable=False, server_default="false"),
        _uuid("human_controlled_by", nullable=True),
        _timestamp("human_controlled_at"),
        _timestamp("created_at", nullable=False, default_now=True),
    )
    op.create_index("ix_leads_organization", "leads", ["organization_id"])

    op.create_table(
        "agents_registry",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        _uuid("organization_id"),
        sa.Column("agent_key", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column(
            "required_providers",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("is_enabled", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("status", sa.String(20), nullable=False, server_default="idle"),
        sa.Column("last_error_message", sa.Text, nullable=True),
        _timestamp("last_error_at"),
        _timestamp("updated_at", nullable=False, default_now=True),
        sa.UniqueConstraint("organization_id", "agent_key", name="uq_agents_registry_org_key"),
        sa.CheckConstraint(
            "status IN ('idle', 'active', 'degraded', 'disabled', 'error')",
            name="ck_agents_registry_status",
        ),
    )

    op.create_table(
        "agent_tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        _uuid("organization_id"),
        _uuid("lead_id"),
        sa.Column("agent_key", sa.String(100), nullable=False),
        sa.Column("action_kind", sa.String(50), nullable=False),
        _timestamp("scheduled_for", nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("pause_reason", sa.Text, nullable=True),
        _timestamp("paused_at"),
        _timestamp("executed_at"),
        _timestamp("completed_at"),
        sa.Column("last_error", sa.Text, nullable=True),
        sa.Column("context", postgresql.JSONB, nullable=False, server_default="{}"),
        _timestamp("created_at", nullable=False, default_now=True),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'failed', "
            "'paused_human_control', 'cancelled')",
            name="ck_agent_tasks_status",
        ),
    )

    # Backs due-task selection: only pending rows are ever scanned
    op.create_index(
        "ix_agent_tasks_due",
        "agent_tasks",
        ["scheduled_for"],
        postgresql_where=sa.text("status = 'pending'"),
    )
    op.create_index("ix_agent_tasks_lead", "agent_tasks", ["organization_id", "lead_id"])

    op.create_table(
        "organization_credentials",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False,
                  server_default=sa.text("gen_random_uuid()")),
        _uuid("organization_id"),
        sa.Column("twilio_account_sid", sa.Text, nullable=True),
        sa.Column("twilio_auth_token", sa.Text, nullable=True),
        sa.Column("bland_api_key", sa.Text, nullable=True),
        sa.Column("openai_api_key", sa.Text, nullable=True),
        sa.Column("persona_api_key", sa.Text, nullable=True),
        sa.Column("doorloop_api_key", sa.Text, nullable=True),
        sa.Column("resend_api_key", sa.Text, nullable=True),
        _timestamp("updated_at", nullable=False, default_now=True),
        sa.UniqueConstraint("organization_id", name="uq_organization_credentials_org"),
    )

    op.create_table(
        "provider_health",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False,
                  server_default=sa.text("gen_random_uuid()")),
        _uuid("organization_id"),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("healthy", sa.Boolean, nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("latency_ms", sa.Integer, nullable=True),
        _timestamp("tested_at", nullable=False, default_now=True),
        sa.UniqueConstraint("organization_id", "provider", name="uq_provider_health_org_provider"),
    )

    op.create_table(
        "agent_activity_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        _uuid("organization_id", nullable=True),
        sa.Column("agent_key", sa.String(100), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("details", postgresql.JSONB, nullable=False, server_default="{}"),
        _uuid("lead_id", nullable=True),
        _uuid("task_id", nullable=True),
        sa.Column("execution_ms", sa.Integer, nullable=True),
        sa.Column("cost", sa.Float, nullable=False, server_default="0"),
        _timestamp("created_at", nullable=False, default_now=True),
    )
    op.create_index(
        "ix_agent_activity_log_org_created",
        "agent_activity_log",
        ["organization_id", "created_at"],
    )
    op.create_index("ix_agent_activity_log_task", "agent_activity_log", ["task_id"])


def downgrade() -> None:
    """Drop orchestration tables."""
    op.drop_index("ix_agent_activity_log_task", table_name="agent_activity_log")
    op.drop_index("ix_agent_activity_log_org_created", table_name="agent_activity_log")
    op.drop_table("agent_activity_log")
    op.drop_table("provider_health")
    op.drop_table("organization_credentials")
    op.drop_index("ix_agent_tasks_lead", table_name="agent_tasks")
    op.drop_index("ix_agent_tasks_due", table_name="agent_tasks")
    op.drop_table("agent_tasks")
    op.drop_table("agents_registry")
    op.drop_index("ix_leads_organization", table_name="leads")
    op.drop_table("leads")
