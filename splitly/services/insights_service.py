"""
Spending insights service.

Responsibility: dashboard aggregations over personal trip records –
totals, category breakdown, monthly and daily series, the highest spending
day and most frequent category / fund type.  Every aggregation follows the
same shape: convert each record into the display currency, group by a key,
then reduce.

Currency fallback
-----------------
A record without a currency, or whose currency the converter reports as
unknown, is converted from the caller's *default_currency* instead.  A
failure on the default or display currency is not masked.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from splitly.errors import UnknownCurrencyError
from splitly.models.schemas import (
    CategorySlice,
    ExpenseSummary,
    FinancialRecord,
    SeriesPoint,
)
from splitly.utils.currency import Converter, checked_convert
from splitly.utils.money import ZERO
from splitly.utils.time_utils import day_label, month_bucket, month_label

logger = logging.getLogger(__name__)

DAILY_WINDOW_DAYS = 30

CATEGORY_COLORS: Dict[str, str] = {
    "accommodation": "#4361ee",
    "food": "#3a86ff",
    "transportation": "#4cc9f0",
    "activities": "#4895ef",
    "shopping": "#560bad",
    "entertainment": "#7209b7",
    "health": "#f72585",
    "other": "#b5179e",
}


# ── Conversion ───────────────────────────────────────────────────────────────

def convert_record(
    record: FinancialRecord,
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> Decimal:
    """Amount of *record* in *display_currency*, with the default-currency fallback."""
    source = record.currency or default_currency
    if source != default_currency:
        try:
            return checked_convert(convert, record.amount, source, display_currency)
        except UnknownCurrencyError as exc:
            if exc.code != source:
                raise
            logger.warning(
                "Record %r: unknown currency %r, treating amount as %s",
                record.id,
                source,
                default_currency,
            )
    return checked_convert(convert, record.amount, default_currency, display_currency)


def _grouped(
    records: Iterable[FinancialRecord],
    key: Callable[[FinancialRecord], Optional[object]],
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> Dict[object, Decimal]:
    """Sum converted amounts per key, preserving first-seen key order."""
    totals: Dict[object, Decimal] = {}
    for record in records:
        k = key(record)
        if k is None:
            continue
        amount = convert_record(record, convert, display_currency, default_currency)
        totals[k] = totals.get(k, ZERO) + amount
    return totals


# ── Aggregations ─────────────────────────────────────────────────────────────

def total_spent(
    records: Iterable[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> Decimal:
    return sum(
        (convert_record(r, convert, display_currency, default_currency) for r in records),
        ZERO,
    )


def category_breakdown(
    records: Iterable[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> List[CategorySlice]:
    """
    Spending per category, for a pie chart.

    Known categories come first in palette order, then unknown ones in the
    order they were first seen.  Categories summing to zero or less are
    dropped; records without a category are ignored.
    """
    totals = _grouped(
        records, lambda r: r.category, convert, display_currency, default_currency
    )
    ordered = [c for c in CATEGORY_COLORS if c in totals]
    ordered += [c for c in totals if c not in CATEGORY_COLORS]

    return [
        CategorySlice(
            category=category,
            name=category[:1].upper() + category[1:],
            value=totals[category],
            color=CATEGORY_COLORS.get(category, CATEGORY_COLORS["other"]),
        )
        for category in ordered
        if totals[category] > ZERO
    ]


def monthly_series(
    records: Iterable[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> List[SeriesPoint]:
    """Spending per calendar month, ascending by month (not by label)."""
    totals = _grouped(
        records,
        lambda r: month_bucket(r.date),
        convert,
        display_currency,
        default_currency,
    )
    return [
        SeriesPoint(bucket=bucket, label=month_label(bucket), amount=totals[bucket])
        for bucket in sorted(totals)
    ]


def daily_series(
    records: Iterable[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
    today: date,
    window_days: int = DAILY_WINDOW_DAYS,
) -> List[SeriesPoint]:
    """
    Spending per day for records dated within *window_days* days of *today*.

    There is no upper bound: records dated after *today* are kept.
    """
    since = today - timedelta(days=window_days)
    recent = [r for r in records if r.date > since]
    totals = _grouped(
        recent, lambda r: r.date, convert, display_currency, default_currency
    )
    return [
        SeriesPoint(bucket=day, label=day_label(day), amount=totals[day])
        for day in sorted(totals)
    ]


def highest_spending_day(
    records: Iterable[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
) -> Optional[date]:
    """The day with the largest total; the earliest-seen day wins ties."""
    totals = _grouped(
        records, lambda r: r.date, convert, display_currency, default_currency
    )
    best: Optional[date] = None
    for day, amount in totals.items():
        if best is None or amount > totals[best]:
            best = day
    return best


def most_used(records: Iterable[FinancialRecord], field: str) -> Optional[str]:
    """Most frequent non-empty value of *field* (``category`` / ``fund_type``)."""
    counts = Counter(
        getattr(r, field) for r in records if getattr(r, field)
    )
    if not counts:
        return None
    # Counter.most_common keeps first-seen order among equal counts.
    return counts.most_common(1)[0][0]


def expense_summary(
    records: Sequence[FinancialRecord],
    convert: Converter,
    display_currency: str,
    default_currency: str,
    today: date,
    window_days: int = DAILY_WINDOW_DAYS,
) -> ExpenseSummary:
    """Bundle every insight for the expenses dashboard."""
    args = (convert, display_currency, default_currency)
    return ExpenseSummary(
        currency=display_currency,
        total_spent=total_spent(records, *args),
        highest_spending_day=highest_spending_day(records, *args),
        most_used_category=most_used(records, "category"),
        most_used_fund_type=most_used(records, "fund_type"),
        category_breakdown=category_breakdown(records, *args),
        monthly_spending=monthly_series(records, *args),
        daily_spending=daily_series(records, *args, today=today, window_days=window_days),
    )
