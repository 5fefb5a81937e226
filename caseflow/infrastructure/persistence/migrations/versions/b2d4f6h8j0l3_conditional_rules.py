"""conditional_rules

Revision ID: b2d4f6h8j0l3
Revises: a1c3e5g7i9k2
Create Date: 2026-10-19

Per-stage conditional rules, and the time a stage was skipped by one.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "b2d4f6h8j0l3"
down_revision: Union[str, Sequence[str], None] = "a1c3e5g7i9k2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create workflow_conditional_rule and add workflow_stage.skipped_at."""
    op.create_table(
        "workflow_conditional_rule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("stage_id", sa.String(), nullable=False),
        sa.Column("field", sa.String(255), nullable=False),
        sa.Column("operator", sa.String(32), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("then_action", sa.String(32), nullable=False),
        sa.Column("then_value", sa.JSON(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["stage_id"], ["workflow_stage.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_workflow_conditional_rule_stage_id", "workflow_conditional_rule", ["stage_id"]
    )
    op.add_column(
        "workflow_stage",
        sa.Column("skipped_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    """Drop the rules table and the stage column."""
    op.drop_column("workflow_stage", "skipped_at")
    op.drop_index("ix_workflow_conditional_rule_stage_id", table_name="workflow_conditional_rule")
    op.drop_table("workflow_conditional_rule")
