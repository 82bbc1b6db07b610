"""create catalog and execution tables

Revision ID: 3f9c1a7e2b40
Revises: 
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1a7e2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "iam_credentials",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("access_key_id", sa.String(length=128), nullable=False),
        sa.Column("secret_access_key", sa.String(length=255), nullable=False),
        sa.Column("region", sa.String(length=30), nullable=False, server_default="us-east-1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "runners",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("init_code", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "scripts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("runner_id", sa.String(length=36), sa.ForeignKey("runners.id")),
        sa.Column("permission_level", sa.String(length=20), nullable=False, server_default="admin_only"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_scripts_name", "scripts", ["name"])

    op.create_table(
        "target_groups",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("aws_tag_key", sa.String(length=128), nullable=False),
        sa.Column("aws_tag_value", sa.String(length=256), nullable=False),
        sa.Column("region", sa.String(length=30)),
        sa.Column("iam_credential_id", sa.String(length=36), sa.ForeignKey("iam_credentials.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "script_executions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("script_id", sa.String(length=36), sa.ForeignKey("scripts.id"), nullable=False),
        sa.Column("target_group_id", sa.String(length=36), sa.ForeignKey("target_groups.id"), nullable=False),
        sa.Column("execution_mode", sa.String(length=10), nullable=False, server_default="random"),
        sa.Column("template_variables", sa.Text()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("instance_ids", sa.Text()),
        sa.Column("command_id", sa.String(length=64)),
        sa.Column("output", sa.Text()),
        sa.Column("error_message", sa.Text()),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_script_executions_script_id", "script_executions", ["script_id"])
    op.create_index("ix_script_executions_status", "script_executions", ["status"])


def downgrade() -> None:
    op.drop_index("ix_script_executions_status", table_name="script_executions")
    op.drop_index("ix_script_executions_script_id", table_name="script_executions")
    op.drop_table("script_executions")
    op.drop_table("target_groups")
    op.drop_index("ix_scripts_name", table_name="scripts")
    op.drop_table("scripts")
    op.drop_table("runners")
    op.drop_table("iam_credentials")
