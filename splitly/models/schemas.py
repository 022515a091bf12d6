"""
Immutable data models for the Splitly settlement engine and insights API.

These dataclasses travel between the route → service layers.  Editing a
group always produces a new :class:`Group`; nothing here is mutated in
place.  No business logic lives here beyond serialisation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from splitly.utils.money import decimal_to_float
from splitly.utils.time_utils import format_date

SPLIT_EQUAL = "equal"
SPLIT_CUSTOM = "custom"
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_CUSTOM)

TRIP_PLANNED = "planned"
TRIP_ONGOING = "ongoing"
TRIP_COMPLETED = "completed"
TRIP_CANCELLED = "cancelled"
TRIP_STATUSES = (TRIP_PLANNED, TRIP_ONGOING, TRIP_COMPLETED, TRIP_CANCELLED)


#Group ledger atoms
@dataclass(frozen=True)
class Member:
    id: str
    name: str
    email: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"id": self.id, "name": self.name}
        if self.email is not None:
            d["email"] = self.email
        return d


@dataclass(frozen=True)
class Participant:
    """One member's share of a group expense."""
    member_id: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"memberId": self.member_id, "amount": decimal_to_float(self.amount)}


@dataclass(frozen=True)
class GroupExpense:
    """
    An expense shared inside a group.

    ``amount`` and participant shares are expressed in the group's base
    currency; ``original_amount`` keeps the entered figure when the expense
    was recorded in another ``currency``.
    """
    id: str
    title: str
    amount: Decimal
    currency: str
    paid_by: str
    date: str
    participants: Tuple[Participant, ...]
    split_type: str = SPLIT_EQUAL
    notes: Optional[str] = None
    original_amount: Optional[Decimal] = None

    def member_ids(self) -> List[str]:
        return [self.paid_by] + [p.member_id for p in self.participants]

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "title": self.title,
            "amount": decimal_to_float(self.amount),
            "currency": self.currency,
            "paidBy": self.paid_by,
            "date": self.date,
            "participants": [p.to_dict() for p in self.participants],
            "splitType": self.split_type,
        }
        if self.notes is not None:
            d["notes"] = self.notes
        if self.original_amount is not None:
            d["originalAmount"] = decimal_to_float(self.original_amount)
        return d


@dataclass(frozen=True)
class Settlement:
    """A direct payment from ``paid_by`` to ``paid_to``."""
    id: str
    paid_by: str
    paid_to: str
    amount: Decimal
    date: str
    currency: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "paidBy": self.paid_by,
            "paidTo": self.paid_to,
            "amount": decimal_to_float(self.amount),
            "date": self.date,
        }
        if self.currency is not None:
            d["currency"] = self.currency
        if self.notes is not None:
            d["notes"] = self.notes
        return d


@dataclass(frozen=True)
class Group:
    """Aggregate root: every balance is computed within exactly one group."""
    id: str
    name: str
    base_currency: str
    members: Tuple[Member, ...] = ()
    expenses: Tuple[GroupExpense, ...] = ()
    settlements: Tuple[Settlement, ...] = ()

    def member_ids(self) -> List[str]:
        return [m.id for m in self.members]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "baseCurrency": self.base_currency,
            "members": [m.to_dict() for m in self.members],
            "expenses": [e.to_dict() for e in self.expenses],
            "settlements": [s.to_dict() for s in self.settlements],
        }


#Derived balances
@dataclass(frozen=True)
class Balance:
    """``from_id`` owes ``to_id`` exactly ``amount`` in the group base currency."""
    from_id: str
    to_id: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "amount": decimal_to_float(self.amount),
        }


@dataclass(frozen=True)
class ConvertedBalance:
    """A :class:`Balance` re-expressed in a display currency."""
    from_id: str
    to_id: str
    amount: Decimal
    currency: str

    def to_dict(self) -> dict:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "amount": decimal_to_float(self.amount),
            "currency": self.currency,
        }


@dataclass(frozen=True)
class GroupSummary:
    """Per-group totals for one viewing member, in ``currency``."""
    group_id: str
    group_name: str
    currency: str
    viewer_id: str
    total_group_expense: Decimal
    user_paid: Decimal
    user_owes: Decimal
    user_is_owed: Decimal
    net_balance: Decimal
    balances: List[ConvertedBalance]

    def to_dict(self) -> dict:
        return {
            "groupId": self.group_id,
            "groupName": self.group_name,
            "currency": self.currency,
            "viewerMemberId": self.viewer_id,
            "totalGroupExpense": decimal_to_float(self.total_group_expense),
            "userPaid": decimal_to_float(self.user_paid),
            "userOwes": decimal_to_float(self.user_owes),
            "userIsOwed": decimal_to_float(self.user_is_owed),
            "netBalance": decimal_to_float(self.net_balance),
            "balances": [b.to_dict() for b in self.balances],
        }


#Personal trip records (insights)
@dataclass(frozen=True)
class FinancialRecord:
    """
    A personal trip expense, already expressed in its trip's home currency.

    ``currency`` may be missing; aggregations then fall back to a
    caller-supplied default.
    """
    id: str
    date: date
    amount: Decimal
    category: Optional[str] = None
    currency: Optional[str] = None
    fund_type: Optional[str] = None


@dataclass(frozen=True)
class CategorySlice:
    category: str
    name: str
    value: Decimal
    color: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "name": self.name,
            "value": decimal_to_float(self.value),
            "color": self.color,
        }


@dataclass(frozen=True)
class SeriesPoint:
    """One chart bucket; ``bucket`` is the real date the label stands for."""
    bucket: date
    label: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "date": format_date(self.bucket),
            "amount": decimal_to_float(self.amount),
        }


@dataclass(frozen=True)
class ExpenseSummary:
    currency: str
    total_spent: Decimal
    highest_spending_day: Optional[date]
    most_used_category: Optional[str]
    most_used_fund_type: Optional[str]
    category_breakdown: List[CategorySlice]
    monthly_spending: List[SeriesPoint]
    daily_spending: List[SeriesPoint]

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "totalSpent": decimal_to_float(self.total_spent),
            "highestSpendingDay": (
                format_date(self.highest_spending_day)
                if self.highest_spending_day is not None
                else None
            ),
            "mostUsedCategory": self.most_used_category,
            "mostUsedFundType": self.most_used_fund_type,
            "categoryBreakdown": [c.to_dict() for c in self.category_breakdown],
            "monthlySpending": [p.to_dict() for p in self.monthly_spending],
            "dailySpending": [p.to_dict() for p in self.daily_spending],
        }


#Trip funds
@dataclass(frozen=True)
class FundStatus:
    budget_remaining: Decimal
    miscellaneous_remaining: Decimal
    safety_remaining: Decimal
    status: str
    spent: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "budgetRemaining": decimal_to_float(self.budget_remaining),
            "miscellaneousRemaining": decimal_to_float(self.miscellaneous_remaining),
            "safetyRemaining": decimal_to_float(self.safety_remaining),
            "status": self.status,
            "spent": {k: decimal_to_float(v) for k, v in self.spent.items()},
        }


#Trips
@dataclass(frozen=True)
class Trip:
    """A planned or past trip; fund amounts are in ``home_currency``."""
    id: str
    name: str
    destination: str
    start_date: date
    end_date: date
    budget: Decimal
    miscellaneous_funds: Decimal
    safety_funds: Decimal
    home_currency: str
    status: str = TRIP_PLANNED

    def total_funds(self) -> Decimal:
        return self.budget + self.miscellaneous_funds + self.safety_funds


@dataclass(frozen=True)
class TripState:
    trip_id: str
    status: str
    progress: int

    def to_dict(self) -> dict:
        return {"tripId": self.trip_id, "status": self.status, "progress": self.progress}


@dataclass(frozen=True)
class TripSummary:
    currency: str
    total_trips: int
    frequent_destination: Optional[str]
    average_duration: int
    total_budget: Decimal
    upcoming_trips: int
    completed_trips: int
    ongoing_trips: int
    trips: List[TripState] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "totalTrips": self.total_trips,
            "frequentDestination": self.frequent_destination,
            "averageDuration": self.average_duration,
            "totalBudget": decimal_to_float(self.total_budget),
            "upcomingTrips": self.upcoming_trips,
            "completedTrips": self.completed_trips,
            "ongoingTrips": self.ongoing_trips,
            "trips": [t.to_dict() for t in self.trips],
        }
