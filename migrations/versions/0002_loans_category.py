"""ensure the Loans & Debts category exists

Revision ID: 0002
Revises: 0001
Create Date: 2025-01-18 09:30:00.000000

"""

from __future__ import annotations

from alembic import op

from seeds import ensure_loans_category


revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    ensure_loans_category(op.get_bind())


def downgrade() -> None:
    # The category may already carry transactions; leave it in place.
    pass
