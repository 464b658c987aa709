"""category requests and admin settings

Revision ID: 7d41e2b9c5a3
Revises: 3a9c1f0d2b7e
Create Date: 2026-10-19 15:40:07.512930

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7d41e2b9c5a3'
down_revision: Union[str, Sequence[str], None] = '3a9c1f0d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "category_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category_name_he", sa.String(100), nullable=False),
        sa.Column("category_name_ru", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requester_name", sa.String(100), nullable=True),
        sa.Column("requester_email", sa.String(255), nullable=True),
        sa.Column("requester_phone", sa.String(30), nullable=True),
        sa.Column("business_name", sa.String(200), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "created_category_id", sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_category_requests_status", "category_requests", ["status"])

    op.create_table(
        "admin_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("admin_settings")
    op.drop_index("ix_category_requests_status", table_name="category_requests")
    op.drop_table("category_requests")
