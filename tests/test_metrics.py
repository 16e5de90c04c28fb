from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from models import (
    LOANS_CATEGORY_NAME,
    Category,
    LoanDirection,
    PaymentMode,
    TransactionKind,
)
from periods import resolve_time_frame, shift_months
from schemas import LoanDebtIn, SelectionSettlement, TransactionIn
from services import (
    LoanDebtService,
    MetricsService,
    PersonService,
    SettlementService,
    TransactionService,
    fill_daily_series,
)


TODAY = date(2025, 3, 20)


def category_id(session, name: str) -> int:
    return session.scalar(select(Category.id).where(Category.name == name))


def post(session, user_id, day, amount, kind, category, mode=PaymentMode.upi):
    return TransactionService(session, user_id).create(
        TransactionIn(
            date=day,
            mode=mode,
            description=category,
            amount=Decimal(amount),
            kind=kind,
            category_id=category_id(session, category),
        )
    )


def seed_month(session, user_id) -> None:
    income, expense = TransactionKind.income, TransactionKind.expense
    post(session, user_id, date(2025, 3, 1), "5000.00", income, "Salary")
    post(session, user_id, date(2025, 3, 5), "120.00", expense, "Groceries")
    post(
        session,
        user_id,
        date(2025, 3, 5),
        "80.00",
        TransactionKind.expense,
        "Transport",
        mode=PaymentMode.cash,
    )
    post(session, user_id, date(2025, 2, 10), "60.00", expense, "Groceries")

    ravi = PersonService(session, user_id).add("Ravi")
    record = LoanDebtService(session, user_id).create(
        LoanDebtIn(
            person_id=ravi,
            amount=Decimal("500.00"),
            direction=LoanDirection.lent,
            reason="Rent",
            date_created=date(2025, 3, 6),
        )
    )
    LoanDebtService(session, user_id).create(
        LoanDebtIn(
            person_id=ravi,
            amount=Decimal("40.00"),
            direction=LoanDirection.borrowed,
            reason="Cab",
            date_created=date(2025, 3, 7),
        )
    )
    SettlementService(session, user_id).settle(
        SelectionSettlement(person_id=ravi, loan_ids=[record.id]), today=TODAY
    )


def test_dashboard_leaves_loans_out_of_monthly_totals(session, user_id) -> None:
    seed_month(session, user_id)

    summary = MetricsService(session, user_id).dashboard(today=TODAY)

    assert summary["monthly_income"] == Decimal("5000.00")
    assert summary["monthly_expense"] == Decimal("200.00")
    # 5000 - 120 - 80 - 60 - 500 (lent) + 500 (settled)
    assert summary["total_balance"] == Decimal("4740.00")


def test_dashboard_on_empty_ledger_is_zero(session, user_id) -> None:
    summary = MetricsService(session, user_id).dashboard(today=TODAY)

    assert summary == {
        "total_balance": Decimal("0.00"),
        "monthly_income": Decimal("0.00"),
        "monthly_expense": Decimal("0.00"),
    }


def test_mode_breakdown_skips_loans_and_not_applicable_mode(session, user_id) -> None:
    seed_month(session, user_id)

    rows = MetricsService(session, user_id).mode_breakdown(today=TODAY)

    by_mode = {row["mode"]: row for row in rows}
    assert set(by_mode) == {PaymentMode.upi, PaymentMode.cash}
    assert by_mode[PaymentMode.upi]["income"] == Decimal("5000.00")
    assert by_mode[PaymentMode.upi]["expense"] == Decimal("120.00")
    assert by_mode[PaymentMode.cash]["expense"] == Decimal("80.00")


def test_category_breakdown_orders_by_total(session, user_id) -> None:
    seed_month(session, user_id)

    rows = MetricsService(session, user_id).category_breakdown(today=TODAY)

    assert [row["category"] for row in rows] == ["Salary", "Groceries", "Transport"]
    assert LOANS_CATEGORY_NAME not in {row["category"] for row in rows}


def test_daily_and_monthly_spend_exclude_loans(session, user_id) -> None:
    seed_month(session, user_id)
    metrics = MetricsService(session, user_id)

    daily = metrics.daily_spend(date(2025, 3, 1), date(2025, 3, 31))
    monthly = metrics.monthly_spend(date(2025, 1, 1))

    assert daily == [{"date": date(2025, 3, 5), "total_spend": Decimal("200.00")}]
    assert monthly == [
        {"month": "2025-03", "total_spend": Decimal("200.00")},
        {"month": "2025-02", "total_spend": Decimal("60.00")},
    ]


def test_loan_totals_count_pending_only(session, user_id) -> None:
    seed_month(session, user_id)

    totals = MetricsService(session, user_id).loan_totals()

    assert totals == {
        "total_lent": Decimal("0.00"),
        "total_borrowed": Decimal("40.00"),
    }


def test_spend_history_fills_every_day(session, user_id) -> None:
    seed_month(session, user_id)

    history = MetricsService(session, user_id).spend_history("1M", today=TODAY)

    assert history["period"].start == date(2025, 2, 20)
    assert len(history["daily"]) == 29
    assert history["daily"][0] == {
        "date": date(2025, 2, 20),
        "total_spend": Decimal("0.00"),
    }
    spent = {row["date"]: row["total_spend"] for row in history["daily"]}
    assert spent[date(2025, 3, 5)] == Decimal("200.00")
    assert [row["month"] for row in history["monthly"]] == ["2025-03"]


def test_fill_daily_series_zero_fills_gaps() -> None:
    rows = [{"date": date(2025, 1, 2), "total_spend": Decimal("9.00")}]

    filled = fill_daily_series(rows, date(2025, 1, 1), date(2025, 1, 3))

    assert [row["total_spend"] for row in filled] == [
        Decimal("0.00"),
        Decimal("9.00"),
        Decimal("0.00"),
    ]


def test_time_frames_shift_back_by_months() -> None:
    assert resolve_time_frame("3M", today=TODAY).start == date(2024, 12, 20)
    assert resolve_time_frame("1Y", today=TODAY).start == date(2024, 3, 20)
    assert resolve_time_frame(None, today=TODAY).slug == "1M"
    assert shift_months(date(2025, 3, 31), -1) == date(2025, 2, 28)
    with pytest.raises(ValueError):
        resolve_time_frame("2W", today=TODAY)
