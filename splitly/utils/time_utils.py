"""
Date / time utility helpers.

Record dates arrive as ISO strings, either a bare ``"YYYY-MM-DD"`` or a full
timestamp (``"YYYY-MM-DDTHH:MM:SS"`` with an optional ``Z`` / offset).  Only
the calendar date matters for aggregation.
"""

from __future__ import annotations

from datetime import date, datetime

DATE_FORMAT = "%Y-%m-%d"
MONTH_LABEL_FORMAT = "%b %Y"
DAY_LABEL_FORMAT = "%b %d"


def parse_date(raw: str) -> date:
    if not isinstance(raw, str):
        raise ValueError(f"Invalid date {raw!r}. Expected an ISO date string.")

    text = raw.strip()
    try:
        return datetime.strptime(text[:10], DATE_FORMAT).date()
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as exc:
        raise ValueError(
            f"Invalid date {raw!r}. Expected format: YYYY-MM-DD"
        ) from exc


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def month_bucket(d: date) -> date:
    """First day of the month containing *d*; sortable bucket key."""
    return d.replace(day=1)


def month_label(d: date) -> str:
    return d.strftime(MONTH_LABEL_FORMAT)


def day_label(d: date) -> str:
    return d.strftime(DAY_LABEL_FORMAT)
