"""
JSON payload → model parsing shared by the route modules.

Every parser raises :class:`ValueError` / :class:`KeyError` /
:class:`TypeError` on malformed input; the routes turn those into 422
responses.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from splitly.models.schemas import (
    SPLIT_EQUAL,
    TRIP_PLANNED,
    TRIP_STATUSES,
    FinancialRecord,
    Group,
    GroupExpense,
    Member,
    Participant,
    Settlement,
    Trip,
)
from splitly.utils.currency import RateTable
from splitly.utils.money import to_decimal
from splitly.utils.time_utils import parse_date


#Internal field-access helpers
def require_field(obj: Dict[str, Any], key: str) -> Any:
    if not isinstance(obj, dict):
        raise TypeError(f"Expected an object, got {type(obj).__name__}.")
    if key not in obj:
        raise KeyError(f"Missing required field: {key!r}")
    return obj[key]


def require_str(obj: Dict[str, Any], key: str) -> str:
    val = require_field(obj, key)
    if not isinstance(val, str) or not val:
        raise ValueError(f"Field {key!r} must be a non-empty string.")
    return val


def optional_str(obj: Dict[str, Any], key: str) -> Optional[str]:
    val = obj.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise ValueError(f"Field {key!r} must be a string, got {type(val).__name__}.")
    return val


def require_list(obj: Dict[str, Any], key: str) -> List[Any]:
    val = require_field(obj, key)
    if not isinstance(val, list):
        raise ValueError(f"{key!r} must be a list.")
    return val


#Group documents
def parse_member(raw: Dict[str, Any]) -> Member:
    return Member(
        id=require_str(raw, "id"),
        name=require_str(raw, "name"),
        email=optional_str(raw, "email"),
    )


def parse_participant(raw: Dict[str, Any]) -> Participant:
    return Participant(
        member_id=require_str(raw, "memberId"),
        amount=to_decimal(require_field(raw, "amount")),
    )


def parse_expense(raw: Dict[str, Any], default_currency: str) -> GroupExpense:
    original = raw.get("originalAmount")
    return GroupExpense(
        id=require_str(raw, "id"),
        title=optional_str(raw, "title") or "",
        amount=to_decimal(require_field(raw, "amount")),
        currency=optional_str(raw, "currency") or default_currency,
        paid_by=require_str(raw, "paidBy"),
        date=optional_str(raw, "date") or "",
        participants=tuple(parse_participant(p) for p in require_list(raw, "participants")),
        split_type=optional_str(raw, "splitType") or SPLIT_EQUAL,
        notes=optional_str(raw, "notes"),
        original_amount=to_decimal(original) if original is not None else None,
    )


def parse_settlement(raw: Dict[str, Any]) -> Settlement:
    return Settlement(
        id=require_str(raw, "id"),
        paid_by=require_str(raw, "paidBy"),
        paid_to=require_str(raw, "paidTo"),
        amount=to_decimal(require_field(raw, "amount")),
        date=optional_str(raw, "date") or "",
        currency=optional_str(raw, "currency"),
        notes=optional_str(raw, "notes"),
    )


def parse_group(raw: Dict[str, Any]) -> Group:
    base_currency = require_str(raw, "baseCurrency")
    return Group(
        id=require_str(raw, "id"),
        name=optional_str(raw, "name") or "",
        base_currency=base_currency,
        members=tuple(parse_member(m) for m in raw.get("members") or []),
        expenses=tuple(parse_expense(e, base_currency) for e in raw.get("expenses") or []),
        settlements=tuple(parse_settlement(s) for s in raw.get("settlements") or []),
    )


#Rates
def parse_rates(body: Dict[str, Any], reference: str) -> RateTable:
    rates = body.get("rates") or {}
    if not isinstance(rates, dict):
        raise ValueError("'rates' must be an object mapping currency codes to rates.")
    return RateTable(rates, reference=reference)


#Insight records
def parse_record(raw: Dict[str, Any], index: int) -> FinancialRecord:
    if not isinstance(raw, dict):
        raise TypeError(f"Record #{index}: expected an object.")
    if "date" not in raw:
        raise ValueError(f"Record #{index}: missing 'date' field.")
    # Personal trip expenses carry the home-currency figure separately.
    amount = raw.get("amountInHomeCurrency", raw.get("amount"))
    if amount is None:
        raise ValueError(f"Record #{index}: missing 'amount' field.")
    return FinancialRecord(
        id=str(raw.get("id", index)),
        date=parse_date(raw["date"]),
        amount=to_decimal(amount),
        category=optional_str(raw, "category"),
        currency=optional_str(raw, "currency"),
        fund_type=optional_str(raw, "fundType"),
    )


def parse_trip(raw: Dict[str, Any], index: int) -> Trip:
    if not isinstance(raw, dict):
        raise TypeError(f"Trip #{index}: expected an object.")
    start_date = parse_date(require_str(raw, "startDate"))
    end_date = parse_date(require_str(raw, "endDate"))
    if end_date < start_date:
        raise ValueError(f"Trip #{index}: ends before it starts.")
    status = optional_str(raw, "status") or TRIP_PLANNED
    if status not in TRIP_STATUSES:
        raise ValueError(f"Trip #{index}: unknown status {status!r}.")
    return Trip(
        id=str(raw.get("id", index)),
        name=optional_str(raw, "name") or "",
        destination=require_str(raw, "destination"),
        start_date=start_date,
        end_date=end_date,
        budget=to_decimal(raw.get("budget", 0)),
        miscellaneous_funds=to_decimal(raw.get("miscellaneousFunds", 0)),
        safety_funds=to_decimal(raw.get("safetyFunds", 0)),
        home_currency=require_str(raw, "homeCurrency"),
        status=status,
    )


def parse_today(body: Dict[str, Any]) -> date:
    raw = body.get("today")
    if raw is None:
        return date.today()
    return parse_date(raw)
