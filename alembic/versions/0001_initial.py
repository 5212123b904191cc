"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "resources",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("category", sa.String(128)),
        sa.Column("description", sa.Text),
        sa.Column("image_url", sa.String(512)),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("target_quantity", sa.Integer),
        sa.Column("multiplier", sa.Float, nullable=False, server_default="1.0"),
        sa.Column("last_updated_by", sa.String(128)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.CheckConstraint("quantity >= 0", name="ck_resources_quantity_non_negative"),
    )
    op.create_index("ix_resources_category", "resources", ["category"])

    op.create_table(
        "resource_history",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("resource_id", sa.String(64), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("previous_quantity", sa.Integer, nullable=False),
        sa.Column("new_quantity", sa.Integer, nullable=False),
        sa.Column("change_amount", sa.Integer, nullable=False),
        sa.Column("change_type", sa.String(16), nullable=False),
        sa.Column("updated_by", sa.String(128), nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_resource_history_resource_id", "resource_history", ["resource_id"])
    op.create_index("ix_resource_history_resource_created", "resource_history", ["resource_id", "created_at"])

    op.create_table(
        "leaderboard_entries",
        sa.Column("actor_id", sa.String(128), primary_key=True),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("actions_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

def downgrade():
    op.drop_table("leaderboard_entries")

    op.drop_index("ix_resource_history_resource_created", table_name="resource_history")
    op.drop_index("ix_resource_history_resource_id", table_name="resource_history")
    op.drop_table("resource_history")

    op.drop_index("ix_resources_category", table_name="resources")
    op.drop_table("resources")
