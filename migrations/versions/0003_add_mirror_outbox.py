"""add mirror outbox for failed loan postings

Revision ID: 0003
Revises: 0002
Create Date: 2025-02-02 18:15:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    if sa.inspect(op.get_bind()).has_table("mirror_outbox"):
        return
    op.create_table(
        "mirror_outbox",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "loan_debt_id",
            sa.Integer(),
            sa.ForeignKey("loans_debts.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("error", sa.Text(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("mirror_outbox")
