"""initial_workflow_engine_schema

Revision ID: a1c3e5g7i9k2
Revises:
Create Date: 2026-10-19

Stages, tasks, dependencies, SLA rules, approval chains, parallel groups,
time entries, notifications and the append-only audit log. On PostgreSQL a
trigger additionally blocks UPDATE/DELETE on the audit log.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "a1c3e5g7i9k2"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False
        )
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False
            )
        )
    return cols


def upgrade() -> None:
    """Create engine tables and indexes."""
    op.create_table(
        "workflow_stage",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("case_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("stage_order", sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_stage_case_id", "workflow_stage", ["case_id"])

    op.create_table(
        "workflow_task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("case_id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), server_default="pending", nullable=False),
        sa.Column("priority", sa.String(16), server_default="medium", nullable=False),
        sa.Column("assigned_to_user_id", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sla_state", sa.String(16), nullable=True),
        sa.Column("sla_breached_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["stage_id"], ["workflow_stage.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_workflow_task_stage_id", "workflow_task", ["stage_id"])
    op.create_index("ix_workflow_task_case_status", "workflow_task", ["case_id", "status"])
    op.create_index(
        "ix_workflow_task_assignee", "workflow_task", ["assigned_to_user_id", "status"]
    )

    op.create_table(
        "workflow_task_dependency",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("dependency_type", sa.String(32), nullable=False),
        sa.Column("depends_on", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["workflow_task.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("task_id", "dependency_type", name="uq_task_dependency_type"),
    )
    op.create_index(
        "ix_workflow_task_dependency_task_id", "workflow_task_dependency", ["task_id"]
    )

    op.create_table(
        "workflow_sla_rule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("scope", sa.String(), nullable=True),
        sa.Column("warning_threshold_hours", sa.Float(), nullable=False),
        sa.Column("breach_threshold_hours", sa.Float(), nullable=False),
        sa.Column("auto_notify", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("priority", "scope", name="uq_sla_rule_priority_scope"),
    )
    op.create_index(
        "uq_sla_rule_global_priority",
        "workflow_sla_rule",
        ["priority"],
        unique=True,
        sqlite_where=sa.text("scope IS NULL"),
        postgresql_where=sa.text("scope IS NULL"),
    )

    op.create_table(
        "workflow_approval_chain",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("current_step", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["workflow_task.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("task_id"),
    )
    op.create_table(
        "workflow_approval_step",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("chain_id", sa.String(), nullable=False),
        sa.Column("approver_id", sa.String(), nullable=False),
        sa.Column("step_order", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["chain_id"], ["workflow_approval_chain.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint("chain_id", "step_order", name="uq_approval_step_order"),
    )
    op.create_index(
        "ix_workflow_approval_step_chain_id", "workflow_approval_step", ["chain_id"]
    )

    op.create_table(
        "workflow_parallel_group",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("task_ids", sa.JSON(), nullable=False),
        sa.Column("completion_rule", sa.String(16), nullable=False),
        sa.Column("completion_threshold", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["stage_id"], ["workflow_stage.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_workflow_parallel_group_stage_id", "workflow_parallel_group", ["stage_id"]
    )

    op.create_table(
        "workflow_time_entry",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("billable", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["workflow_task.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_workflow_time_entry_task_id", "workflow_time_entry", ["task_id"])
    op.create_index("ix_workflow_time_entry_user_id", "workflow_time_entry", ["user_id"])
    op.create_index(
        "uq_time_entry_open",
        "workflow_time_entry",
        ["task_id", "user_id"],
        unique=True,
        sqlite_where=sa.text("end_time IS NULL"),
        postgresql_where=sa.text("end_time IS NULL"),
    )

    op.create_table(
        "workflow_notification",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=True),
        sa.Column("case_id", sa.String(), nullable=True),
        sa.Column("priority", sa.String(16), server_default="normal", nullable=False),
        sa.Column("read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_notification_task_id", "workflow_notification", ["task_id"])
    op.create_index(
        "ix_workflow_notification_user_read", "workflow_notification", ["user_id", "read"]
    )

    op.create_table(
        "workflow_audit_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=False),
        sa.Column("case_id", sa.String(), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column(
            "timestamp", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False
        ),
        sa.Column("previous_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_audit_log_case_id", "workflow_audit_log", ["case_id"])
    op.create_index("ix_workflow_audit_log_action", "workflow_audit_log", ["action"])
    op.create_index("ix_workflow_audit_log_user_id", "workflow_audit_log", ["user_id"])
    op.create_index("ix_workflow_audit_log_timestamp", "workflow_audit_log", ["timestamp"])
    op.create_index(
        "ix_workflow_audit_log_entity", "workflow_audit_log", ["entity_type", "entity_id"]
    )

    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            """
            CREATE OR REPLACE FUNCTION prevent_workflow_audit_log_mutation()
            RETURNS TRIGGER
            LANGUAGE plpgsql
            AS $$
            BEGIN
                RAISE EXCEPTION 'workflow_audit_log rows are append-only'
                    USING ERRCODE = 'integrity_constraint_violation';
            END;
            $$
            """
        )
        op.execute(
            "CREATE TRIGGER prevent_workflow_audit_log_update_delete "
            "BEFORE UPDATE OR DELETE ON workflow_audit_log "
            "FOR EACH ROW EXECUTE PROCEDURE prevent_workflow_audit_log_mutation()"
        )


def downgrade() -> None:
    """Drop engine tables (reverse dependency order)."""
    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            "DROP TRIGGER IF EXISTS prevent_workflow_audit_log_update_delete ON workflow_audit_log"
        )
        op.execute("DROP FUNCTION IF EXISTS prevent_workflow_audit_log_mutation()")
    for table in (
        "workflow_audit_log",
        "workflow_notification",
        "workflow_time_entry",
        "workflow_parallel_group",
        "workflow_approval_step",
        "workflow_approval_chain",
        "workflow_sla_rule",
        "workflow_task_dependency",
        "workflow_task",
        "workflow_stage",
    ):
        op.drop_table(table)
