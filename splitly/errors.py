"""
Exception hierarchy for the settlement engine and its services.

Data-integrity faults are raised at the point of detection and never
coerced; validation errors are user-facing rejections raised before any
mutation; conversion errors come from the currency boundary and propagate
unmasked.
"""

from __future__ import annotations


class SplitlyError(Exception):
    """Base class for every error raised by :mod:`splitly`."""

    kind = "splitly_error"


# ── Data integrity ───────────────────────────────────────────────────────────

class DataIntegrityError(SplitlyError):
    kind = "data_integrity"


class UnknownMemberError(DataIntegrityError):
    kind = "unknown_member"

    def __init__(self, member_id: str, context: str = "") -> None:
        self.member_id = member_id
        where = f" ({context})" if context else ""
        super().__init__(f"Member {member_id!r} is not part of this group{where}.")


class DuplicateMemberError(DataIntegrityError):
    kind = "duplicate_member"

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(f"Member {member_id!r} already exists in this group.")


class InvalidSplitError(DataIntegrityError):
    kind = "invalid_split"


class InvalidExpenseError(DataIntegrityError):
    kind = "invalid_expense"


class InvalidSettlementError(DataIntegrityError):
    kind = "invalid_settlement"


# ── User-facing validation ───────────────────────────────────────────────────

class ValidationError(SplitlyError):
    kind = "validation"


class MemberInUseError(ValidationError):
    kind = "member_in_use"

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(
            f"Cannot remove member {member_id!r} with existing expenses or settlements."
        )


class RecordNotFoundError(ValidationError):
    kind = "not_found"

    def __init__(self, record: str, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"{record.capitalize()} {record_id!r} not found.")


# ── Currency conversion ──────────────────────────────────────────────────────

class ConversionError(SplitlyError):
    kind = "conversion"


class UnknownCurrencyError(ConversionError):
    kind = "unknown_currency"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"No usable exchange rate for currency {code!r}.")
