from datetime import date
from decimal import Decimal

import pytest

from splitly.errors import UnknownCurrencyError
from splitly.models.schemas import FinancialRecord
from splitly.services.fund_service import fund_status
from splitly.services.insights_service import (
    category_breakdown,
    daily_series,
    expense_summary,
    highest_spending_day,
    monthly_series,
    most_used,
    total_spent,
)
from splitly.utils.currency import RateTable

RATES = RateTable({"EUR": "0.5"})


def record(rid, day, amount, category="food", currency="USD", fund_type="budget"):
    return FinancialRecord(
        id=rid,
        date=date.fromisoformat(day),
        amount=Decimal(str(amount)),
        category=category,
        currency=currency,
        fund_type=fund_type,
    )


@pytest.fixture
def records():
    return [
        record("r1", "2024-02-10", 40, "food"),
        record("r2", "2024-01-05", 100, "accommodation"),
        record("r3", "2024-02-10", 60, "transportation", currency="EUR"),
        record("r4", "2024-12-01", 10, "food", currency=None),
    ]


def test_total_spent_converts_and_falls_back(records):
    # r3 is 60 EUR = 120 USD; r4 has no currency and counts as USD.
    assert total_spent(records, RATES, "USD", "USD") == Decimal("270")


def test_unknown_currency_uses_default():
    rows = [record("r1", "2024-01-01", 10, currency="XYZ")]

    assert total_spent(rows, RATES, "EUR", "USD") == Decimal("5")


def test_unknown_display_currency_still_fails(records):
    with pytest.raises(UnknownCurrencyError):
        total_spent(records, RATES, "GBP", "USD")


def test_category_breakdown_orders_by_palette_and_drops_empty(records):
    rows = records + [record("r5", "2024-03-01", 0, "shopping")]

    slices = category_breakdown(rows, RATES, "USD", "USD")

    assert [(s.category, s.value) for s in slices] == [
        ("accommodation", Decimal("100")),
        ("food", Decimal("50")),
        ("transportation", Decimal("120")),
    ]
    assert slices[0].name == "Accommodation"
    assert slices[0].color == "#4361ee"


def test_unknown_category_uses_other_color():
    slices = category_breakdown([record("r1", "2024-01-01", 5, "souvenirs")], RATES, "USD", "USD")

    assert slices[0].color == "#b5179e"


def test_monthly_series_sorted_by_real_date(records):
    points = monthly_series(records, RATES, "USD", "USD")

    # "Dec 2024" < "Feb 2024" < "Jan 2024" alphabetically; real order differs.
    assert [p.label for p in points] == ["Jan 2024", "Feb 2024", "Dec 2024"]
    assert [p.amount for p in points] == [Decimal("100"), Decimal("160"), Decimal("10")]


def test_daily_series_keeps_recent_and_future_days(records):
    points = daily_series(records, RATES, "USD", "USD", today=date(2024, 2, 20))

    # Jan 5 is outside the window; Dec 1 lies after today and is kept.
    assert [(p.label, p.amount) for p in points] == [
        ("Feb 10", Decimal("160")),
        ("Dec 01", Decimal("10")),
    ]


def test_daily_series_window_excludes_its_first_day():
    rows = [
        record("r1", "2024-01-21", 5),
        record("r2", "2024-01-22", 7),
    ]

    points = daily_series(rows, RATES, "USD", "USD", today=date(2024, 2, 20))

    assert [p.bucket for p in points] == [date(2024, 1, 22)]


def test_highest_spending_day_ties_go_to_first_seen():
    rows = [
        record("r1", "2024-03-02", 50),
        record("r2", "2024-03-01", 50),
        record("r3", "2024-03-03", 20),
    ]

    assert highest_spending_day(rows, RATES, "USD", "USD") == date(2024, 3, 2)
    assert highest_spending_day([], RATES, "USD", "USD") is None


def test_most_used_counts_records(records):
    assert most_used(records, "category") == "food"
    assert most_used(records, "fund_type") == "budget"
    assert most_used([], "category") is None


def test_expense_summary_serialises(records):
    summary = expense_summary(records, RATES, "USD", "USD", today=date(2024, 2, 20))
    data = summary.to_dict()

    assert data["totalSpent"] == 270.0
    assert data["highestSpendingDay"] == "2024-02-10"
    assert data["mostUsedCategory"] == "food"
    assert len(data["monthlySpending"]) == 3


def test_fund_status_cascades():
    spend = [
        record("r1", "2024-01-01", 100, fund_type="budget"),
        record("r2", "2024-01-02", 30, fund_type="miscellaneous"),
    ]

    status = fund_status(Decimal("100"), Decimal("50"), Decimal("20"), spend)

    assert status.budget_remaining == 0
    assert status.miscellaneous_remaining == Decimal("20")
    assert status.status == "miscellaneous"

    depleted = fund_status(Decimal("0"), Decimal("0"), Decimal("0"), spend)
    assert depleted.status == "depleted"
