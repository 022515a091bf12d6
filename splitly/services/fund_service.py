"""
Trip fund status.

A trip draws on three funds in order: the main budget, then miscellaneous
funds, then safety funds.  Spending is tracked per fund type in the trip's
home currency.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable

from splitly.models.schemas import FinancialRecord, FundStatus
from splitly.utils.money import ZERO

FUND_BUDGET = "budget"
FUND_MISCELLANEOUS = "miscellaneous"
FUND_SAFETY = "safety"
FUND_TYPES = (FUND_BUDGET, FUND_MISCELLANEOUS, FUND_SAFETY)
DEPLETED = "depleted"


def spent_by_fund(expenses: Iterable[FinancialRecord]) -> Dict[str, Decimal]:
    spent = {fund: ZERO for fund in FUND_TYPES}
    for expense in expenses:
        if expense.fund_type in spent:
            spent[expense.fund_type] += expense.amount
    return spent


def fund_status(
    budget: Decimal,
    miscellaneous_funds: Decimal,
    safety_funds: Decimal,
    expenses: Iterable[FinancialRecord],
) -> FundStatus:
    spent = spent_by_fund(expenses)
    budget_remaining = max(ZERO, budget - spent[FUND_BUDGET])
    misc_remaining = max(ZERO, miscellaneous_funds - spent[FUND_MISCELLANEOUS])
    safety_remaining = max(ZERO, safety_funds - spent[FUND_SAFETY])

    if budget_remaining > ZERO:
        status = FUND_BUDGET
    elif misc_remaining > ZERO:
        status = FUND_MISCELLANEOUS
    elif safety_remaining > ZERO:
        status = FUND_SAFETY
    else:
        status = DEPLETED

    return FundStatus(
        budget_remaining=budget_remaining,
        miscellaneous_remaining=misc_remaining,
        safety_remaining=safety_remaining,
        status=status,
        spent=spent,
    )
