"""
Group summary aggregator.

Responsibility: express a group's totals and balances in a display
currency from the point of view of one member.  Pure – the converter and
the display currency are explicit arguments, and any conversion failure
propagates to the caller.

Notes
-----
* Expense amounts are converted from the group's ``base_currency``; the
  expense's own ``currency`` field is not consulted, because stored
  amounts are already normalised to the base currency when recorded.
* By default only the first balance touching the viewer feeds
  ``user_owes`` / ``user_is_owed``.  That is exact for two-member groups;
  pass ``all_counterparties=True`` to sum over every counterparty.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from splitly.errors import UnknownMemberError
from splitly.models.schemas import Balance, ConvertedBalance, Group, GroupSummary
from splitly.services.balance_service import compute_balances
from splitly.utils.currency import Converter, checked_convert
from splitly.utils.money import ZERO

logger = logging.getLogger(__name__)


def _viewer_position(
    balances: List[Balance],
    viewer_id: str,
    all_counterparties: bool,
) -> tuple[Decimal, Decimal]:
    """Return ``(owes, is_owed)`` for *viewer_id* in base currency."""
    owes = ZERO
    is_owed = ZERO

    for balance in balances:
        if balance.from_id == viewer_id:
            owes += balance.amount
        elif balance.to_id == viewer_id:
            is_owed += balance.amount
        else:
            continue
        if not all_counterparties:
            break

    return owes, is_owed


def summarize(
    group: Group,
    viewer_id: str,
    convert: Converter,
    display_currency: str,
    all_counterparties: bool = False,
) -> GroupSummary:
    """
    Summarise *group* for *viewer_id* in *display_currency*.

    Parameters
    ----------
    group:
        The full group record.
    viewer_id:
        Member whose paid / owes / is-owed figures are reported.
    convert:
        ``convert(amount, from_code, to_code)``; see
        :mod:`splitly.utils.currency`.
    display_currency:
        Currency every returned amount is expressed in.
    all_counterparties:
        Sum the viewer's position over every balance instead of the first
        matching one.

    Raises
    ------
    UnknownMemberError
        If *viewer_id* is not a member, or the history references a
        non-member.
    ConversionError
        If *convert* fails or yields a non-finite amount.
    """
    if viewer_id not in group.member_ids():
        raise UnknownMemberError(viewer_id, "summary viewer")

    base = group.base_currency

    def to_display(amount: Decimal) -> Decimal:
        return checked_convert(convert, amount, base, display_currency)

    total_group_expense = ZERO
    user_paid = ZERO
    for expense in group.expenses:
        converted = to_display(expense.amount)
        total_group_expense += converted
        if expense.paid_by == viewer_id:
            user_paid += converted

    balances = compute_balances(group)
    owes, is_owed = _viewer_position(balances, viewer_id, all_counterparties)
    user_owes = to_display(owes) if owes else ZERO
    user_is_owed = to_display(is_owed) if is_owed else ZERO

    summary = GroupSummary(
        group_id=group.id,
        group_name=group.name,
        currency=display_currency,
        viewer_id=viewer_id,
        total_group_expense=total_group_expense,
        user_paid=user_paid,
        user_owes=user_owes,
        user_is_owed=user_is_owed,
        net_balance=user_is_owed - user_owes,
        balances=[
            ConvertedBalance(
                from_id=b.from_id,
                to_id=b.to_id,
                amount=to_display(b.amount),
                currency=display_currency,
            )
            for b in balances
        ],
    )
    logger.debug(
        "Summarised group %r for %r: total=%s net=%s %s",
        group.id,
        viewer_id,
        summary.total_group_expense,
        summary.net_balance,
        display_currency,
    )
    return summary


def default_viewer(group: Group) -> Optional[str]:
    """The group's first member, or ``None`` for an empty group."""
    return group.members[0].id if group.members else None


def summarize_groups(
    groups: Iterable[Group],
    convert: Converter,
    display_currency: str,
    viewer_for: Optional[Callable[[Group], Optional[str]]] = None,
    all_counterparties: bool = False,
) -> List[GroupSummary]:
    """
    Summarise several groups in one display currency.

    *viewer_for* picks the viewing member of each group and defaults to
    :func:`default_viewer`.  Groups without a viewer (no members) are
    skipped.
    """
    pick = viewer_for or default_viewer
    summaries: List[GroupSummary] = []

    for group in groups:
        viewer_id = pick(group)
        if viewer_id is None:
            logger.debug("Skipping group %r: no viewing member", group.id)
            continue
        summaries.append(
            summarize(group, viewer_id, convert, display_currency, all_counterparties)
        )

    return summaries


def overall_net(summaries: Iterable[GroupSummary]) -> Decimal:
    """Total owed to the viewer minus total the viewer owes, across groups."""
    owed = ZERO
    owes = ZERO
    for summary in summaries:
        owed += summary.user_is_owed
        owes += summary.user_owes
    return owed - owes
