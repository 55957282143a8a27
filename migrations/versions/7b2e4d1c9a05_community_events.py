"""community events and connection self guard

Revision ID: 7b2e4d1c9a05
Revises: 3c1f0a9b7d21
Create Date: 2026-10-19 14:03:10.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "7b2e4d1c9a05"
down_revision: Union[str, Sequence[str], None] = "3c1f0a9b7d21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the community_event table and forbid self connections."""
    op.create_table(
        "community_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("creator_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("ends_at > starts_at", name="ck_community_event_window"),
        sa.ForeignKeyConstraint(["community_id"], ["community.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["creator_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_community_event_community_id", "community_event", ["community_id"])

    with op.batch_alter_table("connection") as batch_op:
        batch_op.create_check_constraint(
            "ck_connection_not_self", "user_id <> connected_user_id"
        )


def downgrade() -> None:
    """Drop the self guard and the community_event table."""
    with op.batch_alter_table("connection") as batch_op:
        batch_op.drop_constraint("ck_connection_not_self", type_="check")
    op.drop_index("ix_community_event_community_id", table_name="community_event")
    op.drop_table("community_event")
