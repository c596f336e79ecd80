"""Tests for group and member summaries."""

import pytest
from decimal import Decimal

from splitledger.ledger import summarize_group, summarize_member
from splitledger.models.ledger import Settlement
from splitledger.splits import build_expense


@pytest.fixture
def expenses():
    return [
        build_expense("trip", "A", "300", participant_ids=["A", "B", "C"]),
        build_expense("trip", "B", "60", participant_ids=["A", "B"]),
        build_expense("flat", "C", "500", participant_ids=["C"]),
    ]


@pytest.fixture
def settlements():
    return [
        Settlement(from_id="B", to_id="A", amount="100", group_id="trip", is_paid=True),
        Settlement(from_id="C", to_id="A", amount="100", group_id="trip"),
    ]


class TestSummarizeGroup:

    def test_totals(self, expenses, settlements):
        summary = summarize_group(expenses, settlements, group_id="trip")
        assert summary.group_id == "trip"
        assert summary.total_expenses == Decimal("360.00")
        assert summary.total_settled == Decimal("100.00")
        assert summary.total_pending == Decimal("100.00")
        assert summary.settlement_rate == Decimal("27.78")

    def test_all_groups(self, expenses, settlements):
        summary = summarize_group(expenses, settlements)
        assert summary.total_expenses == Decimal("860.00")

    def test_empty_group_has_zero_rate(self):
        summary = summarize_group([], [], group_id="empty")
        assert summary.total_expenses == Decimal("0.00")
        assert summary.settlement_rate == Decimal("0.00")


class TestSummarizeMember:

    def test_member_view(self, expenses, settlements):
        trip = [e for e in expenses if e.group_id == "trip"]
        summary = summarize_member("A", trip, settlements)
        assert summary.total_paid == Decimal("300.00")
        assert summary.total_share == Decimal("130.00")
        assert summary.net_balance == Decimal("170.00")
        assert summary.amount_owed_to_member == Decimal("100.00")
        assert summary.amount_member_owes == Decimal("0.00")

    def test_debtor_view(self, expenses, settlements):
        summary = summarize_member("C", expenses, settlements)
        assert summary.total_paid == Decimal("500.00")
        assert summary.total_share == Decimal("600.00")
        assert summary.net_balance == Decimal("-100.00")
        assert summary.amount_member_owes == Decimal("100.00")

    def test_stranger(self, expenses):
        summary = summarize_member("Z", expenses, [])
        assert summary.total_paid == Decimal("0.00")
        assert summary.total_share == Decimal("0.00")
