"""Tests for balance aggregation."""

import pytest
from decimal import Decimal

from splitledger.ledger import compute_balances, mark_share_paid
from splitledger.splits import build_expense
from splitledger.validation import UnknownMemberError


MEMBERS = ["A", "B", "C"]


def by_member(balances):
    return {b.member_id: b for b in balances}


class TestComputeBalances:
    """Tests for folding expenses into balances."""

    def test_payer_with_paid_own_share(self):
        """A pays 300 split equally; A's own share is marked paid."""
        expense = build_expense(
            "trip", "A", "300.00",
            participant_ids=MEMBERS,
            mark_payer_share_paid=True,
        )
        balances = by_member(compute_balances(MEMBERS, [expense], group_id="trip"))

        assert balances["A"].total_lent == Decimal("300.00")
        assert balances["A"].total_owed == Decimal("0.00")
        assert balances["A"].net_balance == Decimal("300.00")
        for member in ("B", "C"):
            assert balances[member].total_lent == Decimal("0.00")
            assert balances[member].total_owed == Decimal("100.00")
            assert balances[member].net_balance == Decimal("-100.00")

    def test_payer_credited_full_amount_when_not_participating(self):
        expense = build_expense("trip", "A", "90", participant_ids=["B", "C"])
        balances = by_member(compute_balances(MEMBERS, [expense]))
        assert balances["A"].total_lent == Decimal("90.00")
        assert balances["A"].total_owed == Decimal("0.00")
        assert balances["B"].total_owed == Decimal("45.00")

    def test_paid_shares_are_not_owed(self):
        expense = build_expense("trip", "A", "300", participant_ids=MEMBERS)
        expense = mark_share_paid(expense, "B")
        balances = by_member(compute_balances(MEMBERS, [expense]))
        assert balances["B"].total_owed == Decimal("0.00")
        assert balances["C"].total_owed == Decimal("100.00")

    def test_output_follows_member_order(self):
        expense = build_expense("trip", "C", "30", participant_ids=["C", "B", "A"])
        balances = compute_balances(["B", "C", "A"], [expense])
        assert [b.member_id for b in balances] == ["B", "C", "A"]

    def test_no_expenses(self):
        balances = compute_balances(MEMBERS, [])
        assert all(b.net_balance == 0 for b in balances)
        assert len(balances) == 3

    def test_conservation(self):
        """Net balances of a self-consistent expense set add up to zero."""
        expenses = [
            build_expense("trip", "A", "100.00", participant_ids=MEMBERS),
            build_expense("trip", "B", "45.50", policy="custom", entries=[("A", "20"), ("C", "25.50")]),
            build_expense("trip", "C", "77.77", policy="percentage", entries=[("A", 25), ("B", 75)]),
            build_expense("trip", "A", "10.01", participant_ids=["B", "C"]),
        ]
        balances = compute_balances(MEMBERS, expenses)
        assert abs(sum(b.net_balance for b in balances)) <= Decimal("0.01")

    def test_idempotent(self):
        expenses = [
            build_expense("trip", "A", "100", participant_ids=MEMBERS),
            build_expense("trip", "B", "55.55", participant_ids=["A", "B"]),
        ]
        first = compute_balances(MEMBERS, expenses, group_id="trip")
        second = compute_balances(MEMBERS, expenses, group_id="trip")
        assert first == second

    def test_input_is_not_modified(self):
        expense = build_expense("trip", "A", "100", participant_ids=MEMBERS)
        snapshot = expense.model_dump()
        compute_balances(MEMBERS, [expense])
        assert expense.model_dump() == snapshot

    def test_other_groups_ignored_when_group_given(self):
        expenses = [
            build_expense("trip", "A", "30", participant_ids=MEMBERS),
            build_expense("flat", "A", "999", participant_ids=MEMBERS),
        ]
        balances = by_member(compute_balances(MEMBERS, expenses, group_id="trip"))
        assert balances["A"].total_lent == Decimal("30.00")
        assert balances["A"].group_id == "trip"


class TestUnknownMembers:
    """Expenses that reference members outside the group."""

    def test_skipped_by_default(self):
        expense = build_expense("trip", "X", "40", participant_ids=["A", "X"])
        balances = by_member(compute_balances(["A", "B"], [expense]))
        assert set(balances) == {"A", "B"}
        assert balances["A"].total_owed == Decimal("20.00")
        assert balances["A"].total_lent == Decimal("0.00")

    def test_strict_mode_raises(self):
        expense = build_expense("trip", "A", "40", participant_ids=["A", "X"])
        with pytest.raises(UnknownMemberError) as exc_info:
            compute_balances(["A", "B"], [expense], strict=True)
        assert exc_info.value.member_id == "X"
        assert exc_info.value.expense_id == expense.id

    def test_strict_mode_from_settings(self, monkeypatch):
        from splitledger.config import get_settings

        monkeypatch.setenv("SPLITLEDGER_STRICT_MEMBERSHIP", "true")
        get_settings.cache_clear()
        expense = build_expense("trip", "X", "40", participant_ids=["A"])
        with pytest.raises(UnknownMemberError, match="X"):
            compute_balances(["A"], [expense])
