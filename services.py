from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from passlib.context import CryptContext
from pydantic import TypeAdapter
from sqlalchemy import case, exc as sa_exc, func, select
from sqlalchemy.orm import Session, joinedload

from config import get_settings
from exceptions import (
    ConflictError,
    ConstraintError,
    IntegrityError,
    NoOpError,
    NotFoundError,
)
from models import (
    LOANS_CATEGORY_NAME,
    OTHER_CATEGORY_NAME,
    Category,
    CategoryType,
    LoanDebt,
    LoanDirection,
    LoanStatus,
    MirrorOutbox,
    PaymentMode,
    Person,
    Transaction,
    TransactionKind,
    User,
    normalize_name,
)
from periods import Period, current_month, local_today, resolve_time_frame
from schemas import (
    CategoryIn,
    LoanDebtIn,
    ManualSettlement,
    SelectionSettlement,
    SettlementRequest,
    TransactionIn,
)
from seeds import ensure_loans_category


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def to_money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def _category_type(value: Union[CategoryType, TransactionKind, str]) -> CategoryType:
    return CategoryType(value.value if isinstance(value, Enum) else value)


def _flush_or_raise(session: Session, what: str) -> None:
    try:
        session.flush()
    except sa_exc.IntegrityError as exc:
        session.rollback()
        detail = str(exc.orig)
        if "FOREIGN KEY" in detail.upper():
            raise NotFoundError(f"{what} references a missing record") from exc
        raise ConstraintError(f"{what} violates a ledger constraint: {detail}") from exc


def _not_loans_category():
    return Category.normalized_name != normalize_name(LOANS_CATEGORY_NAME)


@dataclass
class TransactionFilters:
    mode: Optional[PaymentMode] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


@dataclass(frozen=True)
class PersonBalance:
    person_id: int
    person_name: str
    total_lent: Decimal
    total_borrowed: Decimal
    pending_count: int

    @property
    def net_balance(self) -> Decimal:
        return self.total_lent - self.total_borrowed


@dataclass(frozen=True)
class SettlementQuote:
    person_id: int
    person_name: str
    kind: TransactionKind
    amount: Decimal
    description: str
    category_id: int
    settled_on: date
    loan_ids: tuple[int, ...] = ()


class UserService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def register(self, username: str, password: str) -> User:
        clean_name = username.strip()
        if not clean_name or not password:
            raise ConstraintError("Username and password are required")
        if self.session.scalar(select(User.id).where(User.username == clean_name)):
            raise ConflictError("Username already taken")

        user = User(username=clean_name, password_hash=pwd_context.hash(password))
        self.session.add(user)
        self.session.commit()
        logger.info(f"user_registered: user_id={user.id}")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self.session.scalar(select(User).where(User.username == username.strip()))
        if not user or not pwd_context.verify(password, user.password_hash):
            return None
        return user


class CategoryService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(
        self, applies_to: Optional[Union[CategoryType, TransactionKind, str]] = None
    ) -> list[Category]:
        stmt = select(Category).order_by(
            Category.user_created, Category.name, Category.id
        )
        if applies_to is not None:
            wanted = _category_type(applies_to)
            stmt = stmt.where(Category.applies_to.in_((wanted, CategoryType.both)))
        return self.session.scalars(stmt).all()

    def get(self, category_id: int) -> Category:
        category = self.session.get(Category, category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def add(self, data: CategoryIn) -> int:
        clean_name = data.name.strip()
        if not clean_name:
            raise ConstraintError("Category name cannot be empty")

        existing = self.session.scalar(
            select(Category.id)
            .where(
                Category.normalized_name == normalize_name(clean_name),
                Category.applies_to.in_((data.applies_to, CategoryType.both)),
            )
            .order_by(Category.id)
            .limit(1)
        )
        if existing:
            logger.info(f"category_exists: category_id={existing}")
            return existing

        category = Category(
            name=clean_name,
            normalized_name=normalize_name(clean_name),
            applies_to=data.applies_to,
            user_created=True,
        )
        self.session.add(category)
        _flush_or_raise(self.session, "Category")
        self.session.commit()
        return category.id

    def resolve_settlement_category(self, kind: TransactionKind) -> Category:
        categories = self.list_all(kind)
        if not categories:
            raise IntegrityError(
                f"No categories exist for {kind.value} transactions; seed data is missing"
            )
        for preferred in (LOANS_CATEGORY_NAME, OTHER_CATEGORY_NAME):
            key = normalize_name(preferred)
            for category in categories:
                if category.normalized_name == key:
                    return category
        return categories[0]


class TransactionService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def _check_category(self, data: TransactionIn) -> Category:
        category = CategoryService(self.session).get(data.category_id)
        if not category.matches(data.kind):
            raise ConstraintError("Category type mismatch")
        return category

    def _insert(self, data: TransactionIn) -> Transaction:
        """Add a transaction and flush it; the caller owns the commit."""
        self._check_category(data)
        txn = Transaction(
            user_id=self.user_id,
            date=data.date,
            mode=data.mode,
            description=data.description.strip(),
            amount=data.amount,
            kind=data.kind,
            category_id=data.category_id,
        )
        self.session.add(txn)
        _flush_or_raise(self.session, "Transaction")
        return txn

    def create(self, data: TransactionIn) -> Transaction:
        txn = self._insert(data)
        self.session.commit()
        return txn

    def get(self, transaction_id: int) -> Transaction:
        stmt = (
            select(Transaction)
            .options(joinedload(Transaction.category))
            .where(
                Transaction.user_id == self.user_id, Transaction.id == transaction_id
            )
        )
        txn = self.session.scalar(stmt)
        if not txn:
            raise NotFoundError("Transaction not found")
        return txn

    def update(self, transaction_id: int, data: TransactionIn) -> Transaction:
        txn = self.get(transaction_id)
        self._check_category(data)

        txn.date = data.date
        txn.mode = data.mode
        txn.description = data.description.strip()
        txn.amount = data.amount
        txn.kind = data.kind
        txn.category_id = data.category_id

        _flush_or_raise(self.session, "Transaction")
        self.session.commit()
        self.session.refresh(txn)
        return txn

    def delete(self, transaction_id: int) -> None:
        txn = self.get(transaction_id)
        self.session.delete(txn)
        self.session.commit()

    def list(self, filters: Optional[TransactionFilters] = None) -> list[Transaction]:
        filters = filters or TransactionFilters()
        stmt = (
            select(Transaction)
            .options(joinedload(Transaction.category))
            .where(Transaction.user_id == self.user_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        if filters.mode and filters.mode != PaymentMode.none:
            stmt = stmt.where(Transaction.mode == filters.mode)
        if filters.date_from:
            stmt = stmt.where(Transaction.date >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(Transaction.date <= filters.date_to)
        return self.session.scalars(stmt).all()

    def recent(self, limit: int = 10) -> list[Transaction]:
        stmt = (
            select(Transaction)
            .options(joinedload(Transaction.category))
            .where(Transaction.user_id == self.user_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()


class PersonService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def list_all(self) -> list[Person]:
        stmt = (
            select(Person).where(Person.user_id == self.user_id).order_by(Person.name)
        )
        return self.session.scalars(stmt).all()

    def get(self, person_id: int) -> Person:
        person = self.session.get(Person, person_id)
        if not person or person.user_id != self.user_id:
            raise NotFoundError("Person not found")
        return person

    def add(self, name: str) -> int:
        clean_name = name.strip()
        if not clean_name:
            raise ConstraintError("Person name cannot be empty")

        person = Person(user_id=self.user_id, name=clean_name)
        self.session.add(person)
        try:
            self.session.commit()
        except sa_exc.IntegrityError as exc:
            self.session.rollback()
            existing = self.session.scalar(
                select(Person.id).where(
                    Person.user_id == self.user_id, Person.name == clean_name
                )
            )
            if existing is None:
                raise NotFoundError("User not found") from exc
            return existing
        return person.id


class LoanDebtService:
    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def create(self, data: LoanDebtIn) -> LoanDebt:
        person = PersonService(self.session, self.user_id).get(data.person_id)
        loan = LoanDebt(
            user_id=self.user_id,
            person_id=person.id,
            amount=data.amount,
            direction=data.direction,
            reason=data.reason.strip(),
            date_created=data.date_created,
            status=LoanStatus.pending,
        )
        self.session.add(loan)
        _flush_or_raise(self.session, "Loan/debt record")
        self.session.commit()
        logger.info(
            f"loan_created: loan_id={loan.id} direction={loan.direction.value} "
            f"amount={loan.amount}"
        )

        if loan.direction == LoanDirection.lent:
            self._mirror_best_effort(loan)
        return loan

    def _post_mirror(self, loan: LoanDebt) -> Transaction:
        category_id = ensure_loans_category(self.session)
        return TransactionService(self.session, self.user_id)._insert(
            TransactionIn(
                date=loan.date_created,
                mode=PaymentMode.none,
                description=f"Lent to {loan.person.name} ({loan.reason})",
                amount=loan.amount,
                kind=TransactionKind.expense,
                category_id=category_id,
            )
        )

    def _mirror_best_effort(self, loan: LoanDebt) -> Optional[Transaction]:
        try:
            txn = self._post_mirror(loan)
            self.session.commit()
        except Exception as exc:
            self.session.rollback()
            logger.exception(f"loan_mirror_failed: loan_id={loan.id}")
            self._record_mirror_failure(loan.id, exc)
            return None
        return txn

    def _record_mirror_failure(self, loan_id: int, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        entry = self.session.scalar(
            select(MirrorOutbox).where(MirrorOutbox.loan_debt_id == loan_id)
        )
        if entry:
            entry.attempts += 1
            entry.error = message
        else:
            self.session.add(MirrorOutbox(loan_debt_id=loan_id, error=message))
        self.session.commit()

    def pending_mirrors(self) -> list[MirrorOutbox]:
        stmt = (
            select(MirrorOutbox)
            .join(LoanDebt, LoanDebt.id == MirrorOutbox.loan_debt_id)
            .options(joinedload(MirrorOutbox.loan_debt))
            .where(LoanDebt.user_id == self.user_id)
            .order_by(MirrorOutbox.id)
        )
        return self.session.scalars(stmt).all()

    def retry_mirrors(self) -> int:
        posted = 0
        for entry in self.pending_mirrors():
            loan = entry.loan_debt
            try:
                self._post_mirror(loan)
                self.session.delete(entry)
                self.session.commit()
            except Exception as exc:
                self.session.rollback()
                logger.exception(f"loan_mirror_retry_failed: loan_id={loan.id}")
                self._record_mirror_failure(loan.id, exc)
                continue
            posted += 1
        logger.info(f"loan_mirror_retry: posted={posted}")
        return posted

    def get(self, loan_id: int) -> LoanDebt:
        loan = self.session.get(LoanDebt, loan_id)
        if not loan or loan.user_id != self.user_id:
            raise NotFoundError("Loan/debt record not found")
        return loan

    def pending_by_person(self) -> list[PersonBalance]:
        lent = func.coalesce(
            func.sum(
                case(
                    (LoanDebt.direction == LoanDirection.lent, LoanDebt.amount),
                    else_=0,
                )
            ),
            0,
        )
        borrowed = func.coalesce(
            func.sum(
                case(
                    (LoanDebt.direction == LoanDirection.borrowed, LoanDebt.amount),
                    else_=0,
                )
            ),
            0,
        )
        stmt = (
            select(
                Person.id.label("person_id"),
                Person.name.label("person_name"),
                lent.label("total_lent"),
                borrowed.label("total_borrowed"),
                func.count(LoanDebt.id).label("pending_count"),
            )
            .join(LoanDebt, LoanDebt.person_id == Person.id)
            .where(
                Person.user_id == self.user_id,
                LoanDebt.status == LoanStatus.pending,
            )
            .group_by(Person.id, Person.name)
            .order_by(Person.name)
        )
        return [
            PersonBalance(
                person_id=row.person_id,
                person_name=row.person_name,
                total_lent=to_money(row.total_lent),
                total_borrowed=to_money(row.total_borrowed),
                pending_count=int(row.pending_count),
            )
            for row in self.session.execute(stmt)
        ]

    def entries_for_person(
        self, person_id: int, status: Optional[LoanStatus] = None
    ) -> list[LoanDebt]:
        person = PersonService(self.session, self.user_id).get(person_id)
        stmt = (
            select(LoanDebt)
            .options(joinedload(LoanDebt.person))
            .where(LoanDebt.user_id == self.user_id, LoanDebt.person_id == person.id)
            .order_by(LoanDebt.created_at.desc(), LoanDebt.id.desc())
        )
        if status:
            stmt = stmt.where(LoanDebt.status == status)
        return self.session.scalars(stmt).all()

    def person_balance(self, person_id: int) -> Decimal:
        signed = case(
            (LoanDebt.direction == LoanDirection.lent, LoanDebt.amount),
            else_=-LoanDebt.amount,
        )
        total = self.session.execute(
            select(func.coalesce(func.sum(signed), 0)).where(
                LoanDebt.user_id == self.user_id,
                LoanDebt.person_id == person_id,
                LoanDebt.status == LoanStatus.pending,
            )
        ).scalar_one()
        return to_money(total)

    def _mark_settled(
        self, loan_id: int, settled_on: date, *, person_id: Optional[int] = None
    ) -> LoanDebt:
        loan = self.get(loan_id)
        if person_id is not None and loan.person_id != person_id:
            raise NotFoundError("Loan/debt record not found")
        if loan.status == LoanStatus.settled:
            raise ConstraintError(f"Loan/debt record {loan_id} is already settled")
        loan.status = LoanStatus.settled
        loan.date_settled = settled_on
        return loan

    def settle(self, loan_id: int, settled_on: date) -> LoanDebt:
        loan = self._mark_settled(loan_id, settled_on)
        _flush_or_raise(self.session, "Loan/debt record")
        self.session.commit()
        return loan


_settlement_requests = TypeAdapter(SettlementRequest)


class SettlementService:
    """Closes out loan/debt records against one reconciling transaction.

    A request either selects pending records (their lent/borrowed amounts are
    netted) or carries a manual amount booked against the person's running
    balance. ``quote`` computes the outcome without writing; ``settle`` posts
    it, marking the selected records settled in the same commit.
    """

    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id
        self.loans = LoanDebtService(session, self.user_id)

    def quote(
        self,
        request: Union[SelectionSettlement, ManualSettlement, dict],
        *,
        today: Optional[date] = None,
    ) -> SettlementQuote:
        if isinstance(request, dict):
            request = _settlement_requests.validate_python(request)
        person = PersonService(self.session, self.user_id).get(request.person_id)

        if isinstance(request, SelectionSettlement):
            loan_ids, kind, amount = self._net_selection(request)
            description = f"Settlement with {person.name}"
        elif isinstance(request, ManualSettlement):
            kind, amount = self._manual_amount(request)
            loan_ids = ()
            reason = (request.reason or "").strip() or "Partial settlement"
            description = f"{reason} with {person.name}"
        else:
            raise ConstraintError(
                f"Unsupported settlement request: {type(request).__name__}"
            )

        category = CategoryService(self.session).resolve_settlement_category(kind)
        return SettlementQuote(
            person_id=person.id,
            person_name=person.name,
            kind=kind,
            amount=amount,
            description=description,
            category_id=category.id,
            settled_on=today or local_today(),
            loan_ids=loan_ids,
        )

    def _net_selection(
        self, request: SelectionSettlement
    ) -> tuple[tuple[int, ...], TransactionKind, Decimal]:
        loan_ids = tuple(dict.fromkeys(request.loan_ids))
        if not loan_ids:
            raise ConstraintError("Select at least one pending record to settle")

        loans = self.session.scalars(
            select(LoanDebt).where(
                LoanDebt.user_id == self.user_id,
                LoanDebt.person_id == request.person_id,
                LoanDebt.id.in_(loan_ids),
            )
        ).all()
        found = {loan.id for loan in loans}
        missing = [loan_id for loan_id in loan_ids if loan_id not in found]
        if missing:
            raise NotFoundError(f"Loan/debt records not found for this person: {missing}")
        settled = sorted(loan.id for loan in loans if loan.status == LoanStatus.settled)
        if settled:
            raise ConstraintError(f"Loan/debt records already settled: {settled}")

        received = sum(
            (
                to_money(loan.amount)
                for loan in loans
                if loan.direction == LoanDirection.lent
            ),
            Decimal("0.00"),
        )
        paid = sum(
            (
                to_money(loan.amount)
                for loan in loans
                if loan.direction == LoanDirection.borrowed
            ),
            Decimal("0.00"),
        )
        net = received - paid
        if net > 0:
            return loan_ids, TransactionKind.income, net
        if net < 0:
            return loan_ids, TransactionKind.expense, -net
        raise NoOpError("Nothing to settle: net settlement is zero")

    def _manual_amount(
        self, request: ManualSettlement
    ) -> tuple[TransactionKind, Decimal]:
        if request.amount is None or request.amount <= 0:
            raise ConstraintError("Settlement amount must be greater than zero")
        balance = self.loans.person_balance(request.person_id)
        kind = TransactionKind.income if balance > 0 else TransactionKind.expense
        return kind, to_money(request.amount)

    def settle(
        self,
        request: Union[SelectionSettlement, ManualSettlement, dict],
        *,
        today: Optional[date] = None,
    ) -> Transaction:
        quote = self.quote(request, today=today)
        try:
            for loan_id in quote.loan_ids:
                self.loans._mark_settled(
                    loan_id, quote.settled_on, person_id=quote.person_id
                )
            txn = TransactionService(self.session, self.user_id)._insert(
                TransactionIn(
                    date=quote.settled_on,
                    mode=PaymentMode(get_settings().settlement_mode),
                    description=quote.description,
                    amount=quote.amount,
                    kind=quote.kind,
                    category_id=quote.category_id,
                )
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.error(
                f"settlement_failed: person_id={quote.person_id} "
                f"records={len(quote.loan_ids)}"
            )
            raise

        logger.info(
            f"settlement_posted: person_id={quote.person_id} transaction_id={txn.id} "
            f"kind={quote.kind.value} amount={quote.amount} records={len(quote.loan_ids)}"
        )
        return txn


def fill_daily_series(
    rows: list[dict[str, object]], start: date, end: date
) -> list[dict[str, object]]:
    """Expand per-day totals into one entry per calendar day, zero-filled."""
    by_day = {row["date"]: row["total_spend"] for row in rows}
    out: list[dict[str, object]] = []
    current = start
    while current <= end:
        out.append(
            {"date": current, "total_spend": by_day.get(current, Decimal("0.00"))}
        )
        current += timedelta(days=1)
    return out


class MetricsService:
    """Read-only aggregates over the ledger.

    Every aggregate except the all-time balance leaves out rows in the
    Loans & Debts category.
    """

    def __init__(self, session: Session, user_id: int) -> None:
        self.session = session
        self.user_id = user_id

    def dashboard(self, *, today: Optional[date] = None) -> dict[str, Decimal]:
        balance = self.session.execute(
            select(
                func.coalesce(
                    func.sum(
                        case(
                            (
                                Transaction.kind == TransactionKind.income,
                                Transaction.amount,
                            ),
                            else_=-Transaction.amount,
                        )
                    ),
                    0,
                )
            ).where(Transaction.user_id == self.user_id)
        ).scalar_one()

        month = current_month(today)
        row = self.session.execute(
            select(
                self._sum_for(TransactionKind.income).label("income"),
                self._sum_for(TransactionKind.expense).label("expense"),
            )
            .select_from(Transaction)
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.user_id == self.user_id,
                Transaction.date.between(month.start, month.end),
                _not_loans_category(),
            )
        ).one()
        return {
            "total_balance": to_money(balance),
            "monthly_income": to_money(row.income),
            "monthly_expense": to_money(row.expense),
        }

    @staticmethod
    def _sum_for(kind: TransactionKind):
        return func.coalesce(
            func.sum(case((Transaction.kind == kind, Transaction.amount), else_=0)), 0
        )

    def mode_breakdown(self, *, today: Optional[date] = None) -> list[dict[str, object]]:
        month = current_month(today)
        stmt = (
            select(
                Transaction.mode,
                self._sum_for(TransactionKind.income).label("income"),
                self._sum_for(TransactionKind.expense).label("expense"),
            )
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.user_id == self.user_id,
                Transaction.date.between(month.start, month.end),
                Transaction.mode != PaymentMode.none,
                _not_loans_category(),
            )
            .group_by(Transaction.mode)
            .order_by(Transaction.mode)
        )
        return [
            {
                "mode": row.mode,
                "income": to_money(row.income),
                "expense": to_money(row.expense),
            }
            for row in self.session.execute(stmt)
        ]

    def category_breakdown(
        self, *, today: Optional[date] = None
    ) -> list[dict[str, object]]:
        month = current_month(today)
        total = func.sum(Transaction.amount)
        stmt = (
            select(
                Category.name.label("category"),
                Transaction.kind,
                total.label("total"),
            )
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.user_id == self.user_id,
                Transaction.date.between(month.start, month.end),
                _not_loans_category(),
            )
            .group_by(Category.id, Category.name, Transaction.kind)
            .order_by(total.desc(), Category.name)
        )
        return [
            {"category": row.category, "kind": row.kind, "total": to_money(row.total)}
            for row in self.session.execute(stmt)
        ]

    def daily_spend(self, start: date, end: date) -> list[dict[str, object]]:
        stmt = (
            select(Transaction.date, func.sum(Transaction.amount).label("total_spend"))
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.user_id == self.user_id,
                Transaction.kind == TransactionKind.expense,
                Transaction.date.between(start, end),
                _not_loans_category(),
            )
            .group_by(Transaction.date)
            .order_by(Transaction.date)
        )
        return [
            {"date": row.date, "total_spend": to_money(row.total_spend)}
            for row in self.session.execute(stmt)
        ]

    def monthly_spend(self, start: date) -> list[dict[str, object]]:
        month = func.strftime("%Y-%m", Transaction.date).label("month")
        stmt = (
            select(month, func.sum(Transaction.amount).label("total_spend"))
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.user_id == self.user_id,
                Transaction.kind == TransactionKind.expense,
                Transaction.date >= start,
                _not_loans_category(),
            )
            .group_by(month)
            .order_by(month.desc())
        )
        return [
            {"month": row.month, "total_spend": to_money(row.total_spend)}
            for row in self.session.execute(stmt)
        ]

    def loan_totals(self) -> dict[str, Decimal]:
        def pending_sum(direction: LoanDirection):
            return func.coalesce(
                func.sum(
                    case(
                        (
                            (LoanDebt.direction == direction)
                            & (LoanDebt.status == LoanStatus.pending),
                            LoanDebt.amount,
                        ),
                        else_=0,
                    )
                ),
                0,
            )

        row = self.session.execute(
            select(
                pending_sum(LoanDirection.lent).label("lent"),
                pending_sum(LoanDirection.borrowed).label("borrowed"),
            ).where(LoanDebt.user_id == self.user_id)
        ).one()
        return {
            "total_lent": to_money(row.lent),
            "total_borrowed": to_money(row.borrowed),
        }

    def spend_history(
        self, frame: Optional[str] = None, *, today: Optional[date] = None
    ) -> dict[str, object]:
        period: Period = resolve_time_frame(frame, today=today)
        daily = self.daily_spend(period.start, period.end)
        return {
            "period": period,
            "daily": fill_daily_series(daily, period.start, period.end),
            "monthly": self.monthly_spend(period.start),
        }
