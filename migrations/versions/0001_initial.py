"""initial schema and default categories

Revision ID: 0001
Revises:
Create Date: 2025-01-04 10:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

from seeds import seed_default_categories


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, create_constraint=True)


def _has_table(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade():
    if not _has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("username", sa.String(length=80), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(length=200), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )

    if not _has_table("categories"):
        op.create_table(
            "categories",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("normalized_name", sa.String(length=100), nullable=False),
            sa.Column(
                "applies_to",
                _enum("categorytype", "income", "expense", "both"),
                nullable=False,
            ),
            sa.Column(
                "user_created", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.UniqueConstraint(
                "normalized_name", "applies_to", name="uq_category_name_applies_to"
            ),
        )

    if not _has_table("transactions"):
        op.create_table(
            "transactions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
            ),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column(
                "mode",
                _enum("paymentmode", "CC", "UPI", "Cash", "Debit", "N/A"),
                nullable=False,
            ),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column(
                "kind", _enum("transactionkind", "income", "expense"), nullable=False
            ),
            sa.Column(
                "category_id",
                sa.Integer(),
                sa.ForeignKey("categories.id"),
                nullable=False,
            ),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        )
        op.create_index(
            "ix_transactions_user_date", "transactions", ["user_id", "date"]
        )
        op.create_index(
            "ix_transactions_user_category_date",
            "transactions",
            ["user_id", "category_id", "date"],
        )

    if not _has_table("persons"):
        op.create_table(
            "persons",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
            ),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.UniqueConstraint("user_id", "name", name="uq_person_user_name"),
        )

    if not _has_table("loans_debts"):
        op.create_table(
            "loans_debts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
            ),
            sa.Column(
                "person_id", sa.Integer(), sa.ForeignKey("persons.id"), nullable=False
            ),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column(
                "direction", _enum("loandirection", "lent", "borrowed"), nullable=False
            ),
            sa.Column("reason", sa.Text(), nullable=False),
            sa.Column("date_created", sa.Date(), nullable=False),
            sa.Column("date_settled", sa.Date()),
            sa.Column(
                "status",
                _enum("loanstatus", "pending", "settled"),
                nullable=False,
                server_default="pending",
            ),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.CheckConstraint("amount > 0", name="ck_loans_debts_amount_positive"),
            sa.CheckConstraint(
                "(status = 'pending' AND date_settled IS NULL) OR "
                "(status = 'settled' AND date_settled IS NOT NULL)",
                name="ck_loans_debts_settled_date",
            ),
        )
        op.create_index(
            "ix_loans_debts_user_person_status",
            "loans_debts",
            ["user_id", "person_id", "status"],
        )

    seed_default_categories(op.get_bind())


def downgrade():
    op.drop_index("ix_loans_debts_user_person_status", table_name="loans_debts")
    op.drop_table("loans_debts")
    op.drop_table("persons")
    op.drop_index("ix_transactions_user_category_date", table_name="transactions")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("categories")
    op.drop_table("users")
