"""
Trip status, progress and the trips dashboard summary.

All comparisons are by calendar day: a trip is ongoing from its start date
through its end date inclusive, upcoming before it and completed after it.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Sequence

from splitly.models.schemas import (
    TRIP_CANCELLED,
    TRIP_COMPLETED,
    TRIP_ONGOING,
    TRIP_PLANNED,
    Trip,
    TripState,
    TripSummary,
)
from splitly.utils.currency import Converter, checked_convert
from splitly.utils.money import ZERO, round_whole

logger = logging.getLogger(__name__)


def trip_duration(trip: Trip) -> int:
    """Length of *trip* in days, counting both the first and the last day."""
    return (trip.end_date - trip.start_date).days + 1


def trip_status(trip: Trip, today: date) -> str:
    """
    Status of *trip* on *today*.

    ``cancelled`` and ``completed`` are kept as stored; otherwise the status
    follows the dates.
    """
    if trip.status in (TRIP_CANCELLED, TRIP_COMPLETED):
        return trip.status
    if today > trip.end_date:
        return TRIP_COMPLETED
    if today >= trip.start_date:
        return TRIP_ONGOING
    return TRIP_PLANNED


def trip_progress(trip: Trip, today: date) -> int:
    """Percentage of *trip* elapsed on *today*, from 0 to 100."""
    if today < trip.start_date:
        return 0
    total = (trip.end_date - trip.start_date).days
    if today > trip.end_date or total == 0:
        return 100
    elapsed = (today - trip.start_date).days
    return round_whole(Decimal(elapsed) / Decimal(total) * 100)


def trip_summary(
    trips: Sequence[Trip],
    convert: Converter,
    display_currency: str,
    today: date,
) -> TripSummary:
    """
    Aggregate *trips* for the trips dashboard.

    ``total_budget`` sums every trip's budget, miscellaneous and safety funds,
    each converted from the trip's home currency.  The most frequent
    destination is the first seen among equally frequent ones.  Conversion
    errors propagate.
    """
    if not trips:
        return TripSummary(
            currency=display_currency,
            total_trips=0,
            frequent_destination=None,
            average_duration=0,
            total_budget=ZERO,
            upcoming_trips=0,
            completed_trips=0,
            ongoing_trips=0,
        )

    destinations = Counter(t.destination for t in trips)
    total_days = sum(trip_duration(t) for t in trips)
    total_budget = sum(
        (
            checked_convert(convert, t.total_funds(), t.home_currency, display_currency)
            for t in trips
        ),
        ZERO,
    )

    summary = TripSummary(
        currency=display_currency,
        total_trips=len(trips),
        frequent_destination=destinations.most_common(1)[0][0],
        average_duration=round_whole(Decimal(total_days) / len(trips)),
        total_budget=total_budget,
        upcoming_trips=sum(1 for t in trips if t.start_date > today),
        completed_trips=sum(1 for t in trips if t.end_date < today),
        ongoing_trips=sum(1 for t in trips if t.start_date <= today <= t.end_date),
        trips=[
            TripState(
                trip_id=t.id,
                status=trip_status(t, today),
                progress=trip_progress(t, today),
            )
            for t in trips
        ],
    )
    logger.debug("Trip summary over %d trips: %s", len(trips), summary)
    return summary
