"""
Group ledger service.

Responsibility: validated, non-mutating edits of a :class:`Group` – members,
expenses and settlements.  Every function returns a new group; when a rule
is violated the error is raised before anything is built, so the caller's
group is left exactly as it was.

Rules
-----
* Every id referenced by an expense or settlement must be a member.
* A custom split must sum to the expense amount within the tolerance.
* A member referenced anywhere in the history cannot be removed.
* A settlement needs two different members and a positive amount.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Sequence

from splitly.errors import (
    DuplicateMemberError,
    InvalidExpenseError,
    InvalidSettlementError,
    InvalidSplitError,
    MemberInUseError,
    RecordNotFoundError,
    UnknownMemberError,
)
from splitly.models.schemas import (
    SPLIT_CUSTOM,
    SPLIT_TYPES,
    Group,
    GroupExpense,
    Member,
    Participant,
    Settlement,
)
from splitly.utils.currency import Converter, checked_convert
from splitly.utils.money import ZERO, amounts_match, split_evenly, sum_amounts

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


# ── Members ──────────────────────────────────────────────────────────────────

def add_member(
    group: Group,
    name: str,
    email: Optional[str] = None,
    member_id: Optional[str] = None,
) -> Group:
    if not name or not name.strip():
        raise ValueError("Member name must not be empty.")

    member = Member(id=member_id or new_id(), name=name.strip(), email=email)
    if member.id in group.member_ids():
        raise DuplicateMemberError(member.id)

    return replace(group, members=group.members + (member,))


def member_in_use(group: Group, member_id: str) -> bool:
    """``True`` if *member_id* appears anywhere in the expense or settlement history."""
    in_expenses = any(member_id in e.member_ids() for e in group.expenses)
    in_settlements = any(
        member_id in (s.paid_by, s.paid_to) for s in group.settlements
    )
    return in_expenses or in_settlements


def remove_member(group: Group, member_id: str) -> Group:
    """
    Return *group* without *member_id*.

    Raises
    ------
    UnknownMemberError
        If *member_id* is not a member.
    MemberInUseError
        If the member is a payer or participant of any expense, or payer or
        payee of any settlement.
    """
    if member_id not in group.member_ids():
        raise UnknownMemberError(member_id)
    if member_in_use(group, member_id):
        raise MemberInUseError(member_id)

    logger.info("Removing member %r from group %r", member_id, group.id)
    return replace(
        group,
        members=tuple(m for m in group.members if m.id != member_id),
    )


# ── Expenses ─────────────────────────────────────────────────────────────────

def equal_shares(amount: Decimal, member_ids: Sequence[str]) -> List[Participant]:
    """Cent-exact equal participants for *amount* among *member_ids*."""
    if not member_ids:
        raise InvalidSplitError("An expense needs at least one participant.")
    return [
        Participant(member_id=m, amount=share)
        for m, share in zip(member_ids, split_evenly(amount, len(member_ids)))
    ]


def validate_expense(group: Group, expense: GroupExpense) -> None:
    """
    Check *expense* against *group*; raise on the first violation.

    Raises
    ------
    InvalidExpenseError
        Non-positive amount or unsupported split type.
    InvalidSplitError
        No participants, a negative or non-finite share, or a custom split that does not
        add up to the amount.
    UnknownMemberError
        Payer or participant is not a member.
    """
    if not expense.amount.is_finite() or expense.amount <= ZERO:
        raise InvalidExpenseError(f"Expense {expense.id!r}: amount must be positive.")
    if expense.split_type not in SPLIT_TYPES:
        raise InvalidExpenseError(
            f"Expense {expense.id!r}: unknown split type {expense.split_type!r}."
        )
    if not expense.participants:
        raise InvalidSplitError(f"Expense {expense.id!r} has no participants.")

    members = set(group.member_ids())
    if expense.paid_by not in members:
        raise UnknownMemberError(expense.paid_by, f"payer of expense {expense.id!r}")
    for participant in expense.participants:
        if participant.member_id not in members:
            raise UnknownMemberError(
                participant.member_id, f"participant of expense {expense.id!r}"
            )
        if not participant.amount.is_finite():
            raise InvalidSplitError(
                f"Expense {expense.id!r}: share of {participant.member_id!r} is not a number."
            )
        if participant.amount < ZERO:
            raise InvalidSplitError(
                f"Expense {expense.id!r}: share of {participant.member_id!r} is negative."
            )

    if expense.split_type == SPLIT_CUSTOM:
        total_shares = sum_amounts(p.amount for p in expense.participants)
        if not amounts_match(total_shares, expense.amount):
            raise InvalidSplitError(
                f"Expense {expense.id!r}: shares sum to {total_shares}, "
                f"expected {expense.amount}."
            )


def normalize_expense(
    expense: GroupExpense,
    base_currency: str,
    convert: Converter,
) -> GroupExpense:
    """
    Express *expense* in *base_currency*.

    The amount and every share are scaled by the same ratio and the entered
    amount is kept as ``original_amount``.  Conversion errors propagate.
    """
    if expense.currency == base_currency:
        return expense
    if not expense.amount.is_finite() or expense.amount <= ZERO:
        raise InvalidExpenseError(f"Expense {expense.id!r}: amount must be positive.")

    converted = checked_convert(convert, expense.amount, expense.currency, base_currency)
    ratio = converted / expense.amount
    return replace(
        expense,
        amount=converted,
        original_amount=expense.amount,
        participants=tuple(
            replace(p, amount=p.amount * ratio) for p in expense.participants
        ),
    )


def _index_of(records, record_id: str, kind: str) -> int:
    for i, record in enumerate(records):
        if record.id == record_id:
            return i
    raise RecordNotFoundError(kind, record_id)


def add_expense(group: Group, expense: GroupExpense) -> Group:
    validate_expense(group, expense)
    if any(e.id == expense.id for e in group.expenses):
        raise InvalidExpenseError(f"Expense {expense.id!r} already exists.")
    return replace(group, expenses=group.expenses + (expense,))


def update_expense(group: Group, expense: GroupExpense) -> Group:
    """Replace the stored expense with the same id by *expense* as a whole."""
    i = _index_of(group.expenses, expense.id, "expense")
    validate_expense(group, expense)
    expenses = list(group.expenses)
    expenses[i] = expense
    return replace(group, expenses=tuple(expenses))


def delete_expense(group: Group, expense_id: str) -> Group:
    _index_of(group.expenses, expense_id, "expense")
    return replace(
        group,
        expenses=tuple(e for e in group.expenses if e.id != expense_id),
    )


# ── Settlements ──────────────────────────────────────────────────────────────

def validate_settlement(group: Group, settlement: Settlement) -> None:
    if not settlement.amount.is_finite() or settlement.amount <= ZERO:
        raise InvalidSettlementError(
            f"Settlement {settlement.id!r}: amount must be positive."
        )

    members = set(group.member_ids())
    for role, member_id in (("payer", settlement.paid_by), ("payee", settlement.paid_to)):
        if member_id not in members:
            raise UnknownMemberError(member_id, f"{role} of settlement {settlement.id!r}")

    if settlement.paid_by == settlement.paid_to:
        raise InvalidSettlementError(
            f"Settlement {settlement.id!r}: payer and payee must be different members."
        )


def add_settlement(group: Group, settlement: Settlement) -> Group:
    validate_settlement(group, settlement)
    if any(s.id == settlement.id for s in group.settlements):
        raise InvalidSettlementError(f"Settlement {settlement.id!r} already exists.")
    return replace(group, settlements=group.settlements + (settlement,))


def update_settlement(group: Group, settlement: Settlement) -> Group:
    i = _index_of(group.settlements, settlement.id, "settlement")
    validate_settlement(group, settlement)
    settlements = list(group.settlements)
    settlements[i] = settlement
    return replace(group, settlements=tuple(settlements))


def delete_settlement(group: Group, settlement_id: str) -> Group:
    _index_of(group.settlements, settlement_id, "settlement")
    return replace(
        group,
        settlements=tuple(s for s in group.settlements if s.id != settlement_id),
    )
