"""
Group balance calculator.

Responsibility: turn a group's full expense and settlement history into
net pairwise balances ("who owes whom how much").  Pure business logic –
no I/O, no caching.  Balances are recomputed from the ledger on every call
and never stored, so they cannot drift from the history they describe.

Algorithm
---------
1. Build a ledger over every ordered pair of distinct members, all zero.
   ``ledger[x][y]`` is how much *x* owes *y*, net.
2. Expenses: every participant other than the payer owes the payer their
   share (``ledger[p][payer] += s``, ``ledger[payer][p] -= s``).  The
   payer's own share contributes nothing.
3. Settlements: a payment from *a* to *b* discharges debt
   (``ledger[a][b] -= amt``, ``ledger[b][a] += amt``).
4. For each unordered pair, in member-list order, emit one balance in the
   direction of the positive net, unless it is within the tolerance.

Only pairwise netting is performed; debts are never re-routed through a
third member.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from splitly.errors import (
    DuplicateMemberError,
    InvalidExpenseError,
    InvalidSettlementError,
    UnknownMemberError,
)
from splitly.models.schemas import Balance, Group
from splitly.utils.money import EPSILON, ZERO

logger = logging.getLogger(__name__)

Ledger = Dict[str, Dict[str, Decimal]]


# ── Ledger construction ──────────────────────────────────────────────────────

def _empty_ledger(member_ids: Sequence[str]) -> Ledger:
    seen = set()
    for member_id in member_ids:
        if member_id in seen:
            raise DuplicateMemberError(member_id)
        seen.add(member_id)
    return {
        a: {b: ZERO for b in member_ids if b != a}
        for a in member_ids
    }


def _require_member(ledger: Ledger, member_id: str, context: str) -> None:
    if member_id not in ledger:
        raise UnknownMemberError(member_id, context)


def _transfer(ledger: Ledger, debtor: str, creditor: str, amount: Decimal) -> None:
    """Record that *debtor* owes *creditor* a further *amount*."""
    ledger[debtor][creditor] += amount
    ledger[creditor][debtor] -= amount


def build_ledger(group: Group) -> Ledger:
    """
    Build the pairwise net ledger for *group*.

    Raises
    ------
    UnknownMemberError
        If an expense or settlement references an id that is not a member.
    InvalidExpenseError, InvalidSettlementError
        If a share or settlement amount is NaN or infinite.
    """
    ledger = _empty_ledger(group.member_ids())

    for expense in group.expenses:
        _require_member(ledger, expense.paid_by, f"payer of expense {expense.id!r}")
        for participant in expense.participants:
            _require_member(
                ledger,
                participant.member_id,
                f"participant of expense {expense.id!r}",
            )
            if not participant.amount.is_finite():
                raise InvalidExpenseError(
                    f"Expense {expense.id!r}: share of {participant.member_id!r} is not a number."
                )
            if participant.member_id == expense.paid_by:
                continue
            _transfer(ledger, participant.member_id, expense.paid_by, participant.amount)

    for settlement in group.settlements:
        _require_member(ledger, settlement.paid_by, f"payer of settlement {settlement.id!r}")
        _require_member(ledger, settlement.paid_to, f"payee of settlement {settlement.id!r}")
        if not settlement.amount.is_finite():
            raise InvalidSettlementError(
                f"Settlement {settlement.id!r}: amount is not a number."
            )
        if settlement.paid_by == settlement.paid_to:
            continue
        # Paying someone reduces what you owe them.
        _transfer(ledger, settlement.paid_to, settlement.paid_by, settlement.amount)

    return ledger


# ── Public API ───────────────────────────────────────────────────────────────

def balances_from_ledger(ledger: Ledger, member_ids: Sequence[str]) -> List[Balance]:
    """
    Collapse a pairwise ledger into at most one :class:`Balance` per pair.

    Pairs are visited as ``(a, b)`` with *a* before *b* in *member_ids*;
    nets within :data:`~splitly.utils.money.EPSILON` of zero are dropped.
    """
    balances: List[Balance] = []

    for i, a in enumerate(member_ids):
        for b in member_ids[i + 1:]:
            net = ledger[a][b]
            if net > EPSILON:
                balances.append(Balance(from_id=a, to_id=b, amount=net))
            elif net < -EPSILON:
                balances.append(Balance(from_id=b, to_id=a, amount=-net))

    return balances


def compute_balances(group: Group) -> List[Balance]:
    """
    Compute the net pairwise balances of *group*.

    Parameters
    ----------
    group:
        The full group record: members, expenses and settlements.

    Returns
    -------
    list[Balance]
        One entry per unordered member pair with an outstanding net debt
        above the tolerance, in member-pair order.

    Raises
    ------
    UnknownMemberError
        If the history references a member id that is not in the group.
    """
    member_ids = group.member_ids()
    balances = balances_from_ledger(build_ledger(group), member_ids)
    logger.debug(
        "Computed %d balance(s) for group %r over %d expense(s), %d settlement(s)",
        len(balances),
        group.id,
        len(group.expenses),
        len(group.settlements),
    )
    return balances


def ledger_from_balances(balances: Iterable[Balance], member_ids: Sequence[str]) -> Ledger:
    """
    Rebuild a pairwise net ledger from emitted balances.

    The result equals :func:`build_ledger` for every pair whose net exceeds
    the tolerance, and is zero for the pairs that were dropped.
    """
    ledger = _empty_ledger(member_ids)
    for balance in balances:
        _require_member(ledger, balance.from_id, "balance debtor")
        _require_member(ledger, balance.to_id, "balance creditor")
        _transfer(ledger, balance.from_id, balance.to_id, balance.amount)
    return ledger


def net_positions(group: Group) -> Dict[str, Decimal]:
    """
    Net position of every member: positive means the group owes them.

    Derived from the same ledger as :func:`compute_balances`, so the values
    always sum to zero.
    """
    ledger = build_ledger(group)
    return {
        member_id: sum((ledger[other][member_id] for other in ledger[member_id]), ZERO)
        for member_id in group.member_ids()
    }
