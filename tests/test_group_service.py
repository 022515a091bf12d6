from decimal import Decimal

import pytest

from factories import make_expense, make_group, make_settlement
from splitly.errors import (
    DuplicateMemberError,
    InvalidExpenseError,
    InvalidSettlementError,
    InvalidSplitError,
    MemberInUseError,
    RecordNotFoundError,
    UnknownCurrencyError,
    UnknownMemberError,
)
from splitly.models.schemas import Participant
from splitly.services.group_service import (
    add_expense,
    add_member,
    add_settlement,
    delete_expense,
    delete_settlement,
    equal_shares,
    normalize_expense,
    remove_member,
    update_expense,
    update_settlement,
    validate_expense,
)
from splitly.utils.currency import RateTable


def test_remove_member_referenced_as_payer_is_rejected():
    group = make_group(["a", "b"], expenses=[make_expense("e1", "a", {"b": 10})])

    with pytest.raises(MemberInUseError):
        remove_member(group, "a")

    assert group.member_ids() == ["a", "b"]


def test_remove_member_referenced_as_participant_is_rejected():
    group = make_group(["a", "b"], expenses=[make_expense("e1", "a", {"b": 10})])

    with pytest.raises(MemberInUseError):
        remove_member(group, "b")


def test_remove_member_referenced_by_settlement_is_rejected():
    group = make_group(["a", "b", "c"], settlements=[make_settlement("s1", "b", "c", 5)])

    with pytest.raises(MemberInUseError):
        remove_member(group, "c")


def test_remove_unreferenced_member():
    group = make_group(["a", "b", "c"], expenses=[make_expense("e1", "a", {"b": 10})])

    updated = remove_member(group, "c")

    assert updated.member_ids() == ["a", "b"]
    assert group.member_ids() == ["a", "b", "c"]


def test_remove_unknown_member():
    with pytest.raises(UnknownMemberError):
        remove_member(make_group(["a"]), "z")


def test_add_member_generates_id_and_rejects_duplicates():
    group = add_member(make_group(["a"]), "  Bea ", email="bea@example.com")

    assert len(group.members) == 2
    assert group.members[1].name == "Bea"
    assert group.members[1].id

    with pytest.raises(DuplicateMemberError):
        add_member(group, "Another A", member_id="a")


def test_equal_shares_sum_exactly():
    shares = equal_shares(Decimal("100"), ["a", "b", "c"])

    assert [p.amount for p in shares] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(p.amount for p in shares) == Decimal("100")


def test_equal_shares_need_participants():
    with pytest.raises(InvalidSplitError):
        equal_shares(Decimal("10"), [])


def test_custom_split_must_match_total():
    group = make_group(["a", "b"])
    expense = make_expense("e1", "a", {"a": 40, "b": 50}, amount=100, split_type="custom")

    with pytest.raises(InvalidSplitError):
        validate_expense(group, expense)


def test_custom_split_within_tolerance_is_accepted():
    group = make_group(["a", "b"])
    expense = make_expense(
        "e1", "a", {"a": "33.33", "b": "66.66"}, amount=100, split_type="custom"
    )

    assert add_expense(group, expense).expenses == (expense,)


def test_expense_with_unknown_participant_is_rejected():
    group = make_group(["a", "b"])

    with pytest.raises(UnknownMemberError):
        add_expense(group, make_expense("e1", "a", {"x": 10}))


def test_expense_amount_must_be_positive():
    group = make_group(["a", "b"])

    with pytest.raises(InvalidExpenseError):
        add_expense(group, make_expense("e1", "a", {"b": 0}))


def test_expense_with_non_finite_share_is_rejected():
    group = make_group(["a", "b"])

    for bad in ("NaN", "Infinity"):
        expense = make_expense("e1", "a", {"a": 10, "b": bad}, amount=20)
        with pytest.raises(InvalidSplitError):
            validate_expense(group, expense)


def test_update_expense_replaces_whole_record():
    group = make_group(["a", "b"], expenses=[make_expense("e1", "a", {"b": 10})])
    replacement = make_expense("e1", "b", {"a": 25})

    updated = update_expense(group, replacement)

    assert updated.expenses == (replacement,)
    assert group.expenses[0].paid_by == "a"


def test_update_and_delete_missing_expense():
    group = make_group(["a", "b"])

    with pytest.raises(RecordNotFoundError):
        update_expense(group, make_expense("nope", "a", {"b": 1}))
    with pytest.raises(RecordNotFoundError):
        delete_expense(group, "nope")


def test_delete_expense():
    group = make_group(["a", "b"], expenses=[make_expense("e1", "a", {"b": 10})])

    assert delete_expense(group, "e1").expenses == ()


def test_settlement_to_self_is_rejected():
    group = make_group(["a", "b"])

    with pytest.raises(InvalidSettlementError):
        add_settlement(group, make_settlement("s1", "a", "a", 10))


def test_settlement_amount_must_be_positive():
    group = make_group(["a", "b"])

    with pytest.raises(InvalidSettlementError):
        add_settlement(group, make_settlement("s1", "a", "b", -5))


def test_settlement_lifecycle():
    group = add_settlement(make_group(["a", "b"]), make_settlement("s1", "b", "a", 10))
    group = update_settlement(group, make_settlement("s1", "b", "a", 12))

    assert group.settlements[0].amount == Decimal("12")
    assert delete_settlement(group, "s1").settlements == ()


def test_normalize_expense_scales_shares_into_base_currency():
    rates = RateTable({"EUR": "0.5"})
    expense = make_expense("e1", "a", {"a": 10, "b": 30}, currency="EUR")

    normalized = normalize_expense(expense, "USD", rates)

    assert normalized.amount == Decimal("80")
    assert normalized.original_amount == Decimal("40")
    assert normalized.participants == (
        Participant("a", Decimal("20")),
        Participant("b", Decimal("60")),
    )


def test_normalize_expense_in_base_currency_is_unchanged():
    expense = make_expense("e1", "a", {"b": 10})

    assert normalize_expense(expense, "USD", RateTable({})) is expense


def test_normalize_expense_propagates_unknown_currency():
    expense = make_expense("e1", "a", {"b": 10}, currency="XYZ")

    with pytest.raises(UnknownCurrencyError):
        normalize_expense(expense, "USD", RateTable({"EUR": "0.9"}))
