from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base


LOANS_CATEGORY_NAME = "Loans & Debts"
OTHER_CATEGORY_NAME = "Other"


class TransactionKind(str, Enum):
    income = "income"
    expense = "expense"


class CategoryType(str, Enum):
    income = "income"
    expense = "expense"
    both = "both"


class PaymentMode(str, Enum):
    cc = "CC"
    upi = "UPI"
    cash = "Cash"
    debit = "Debit"
    none = "N/A"


class LoanDirection(str, Enum):
    lent = "lent"
    borrowed = "borrowed"


class LoanStatus(str, Enum):
    pending = "pending"
    settled = "settled"


def _enum_column(enum_cls: type[Enum], name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda cls: [member.value for member in cls],
        create_constraint=True,
        validate_strings=True,
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_name(name: str) -> str:
    return name.strip().casefold()


MONEY = Numeric(12, 2, asdecimal=True)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(200), nullable=False)


class Category(Base, TimestampMixin):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(100), nullable=False)
    applies_to: Mapped[CategoryType] = mapped_column(
        _enum_column(CategoryType, "categorytype"), nullable=False
    )
    user_created: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="category"
    )

    __table_args__ = (
        UniqueConstraint(
            "normalized_name", "applies_to", name="uq_category_name_applies_to"
        ),
    )

    def matches(self, kind: TransactionKind) -> bool:
        return self.applies_to in (CategoryType.both, CategoryType(kind.value))


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    mode: Mapped[PaymentMode] = mapped_column(
        _enum_column(PaymentMode, "paymentmode"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    kind: Mapped[TransactionKind] = mapped_column(
        _enum_column(TransactionKind, "transactionkind"), nullable=False
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False
    )

    category: Mapped["Category"] = relationship(
        "Category", back_populates="transactions"
    )

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_category_date", "user_id", "category_id", "date"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )


class Person(Base, TimestampMixin):
    __tablename__ = "persons"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_person_user_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    loans: Mapped[list["LoanDebt"]] = relationship("LoanDebt", back_populates="person")


class LoanDebt(Base, TimestampMixin):
    __tablename__ = "loans_debts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    direction: Mapped[LoanDirection] = mapped_column(
        _enum_column(LoanDirection, "loandirection"), nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    date_created: Mapped[date] = mapped_column(Date, nullable=False)
    date_settled: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[LoanStatus] = mapped_column(
        _enum_column(LoanStatus, "loanstatus"),
        default=LoanStatus.pending,
        nullable=False,
    )

    person: Mapped["Person"] = relationship("Person", back_populates="loans")

    __table_args__ = (
        Index("ix_loans_debts_user_person_status", "user_id", "person_id", "status"),
        CheckConstraint("amount > 0", name="ck_loans_debts_amount_positive"),
        CheckConstraint(
            "(status = 'pending' AND date_settled IS NULL) OR "
            "(status = 'settled' AND date_settled IS NOT NULL)",
            name="ck_loans_debts_settled_date",
        ),
    )


class MirrorOutbox(Base, TimestampMixin):
    __tablename__ = "mirror_outbox"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    loan_debt_id: Mapped[int] = mapped_column(
        ForeignKey("loans_debts.id"), nullable=False, unique=True
    )
    error: Mapped[str] = mapped_column(Text, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    loan_debt: Mapped["LoanDebt"] = relationship("LoanDebt")
