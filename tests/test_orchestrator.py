"""
Tests for the ledger service

Drives the full flow against in-memory storage and checks the audit
trail it leaves behind.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from splitledger.models.audit import AuditEventType, AuditSeverity
from splitledger.models.ledger import Settlement
from splitledger.orchestrator import LedgerService, create_ledger_service
from splitledger.services.storage import DuplicateError, NotFoundError
from splitledger.validation import SplitMismatchError, UnknownMemberError


MEMBERS = ["A", "B", "C"]


@pytest.fixture
def ledger():
    return create_ledger_service(configure=False)


@pytest.fixture
def service(ledger):
    return ledger[0]


@pytest.fixture
def sink(ledger):
    return ledger[1]


def event_types(sink):
    return [e.event_type for e in reversed(sink.get_recent_events())]


class TestExpenseLifecycle:

    def test_add_expense(self, service, sink):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS, title="Hotel")
        assert service.get_group_expenses("trip") == [expense]
        assert event_types(sink) == [AuditEventType.EXPENSE_ADDED]

        event = sink.get_recent_events()[0]
        assert event.entity_id == str(expense.id)
        assert event.group_id == "trip"
        assert event.details["participant_count"] == 3

    def test_rejected_split_is_audited_and_not_saved(self, service, sink):
        with pytest.raises(SplitMismatchError):
            service.add_expense(
                "trip", "A", "100",
                policy="custom",
                entries=[("A", "50"), ("B", "49.98")],
            )
        assert service.get_group_expenses("trip") == []

        event = sink.get_recent_events()[0]
        assert event.event_type == AuditEventType.SPLIT_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "SplitMismatchError"
        assert event.details["policy"] == "custom"

    def test_update_expense(self, service, sink):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        updated = service.update_expense(expense.id, total="150", title="Cab")

        assert service.get_group_expenses("trip") == [updated]
        assert updated.share_for("B").amount == Decimal("50.00")
        event = sink.get_recent_events()[0]
        assert event.event_type == AuditEventType.EXPENSE_UPDATED
        assert event.details["changed_fields"] == ["total_amount", "title", "participants"]

    def test_rejected_update_keeps_the_stored_expense(self, service, sink):
        expense = service.add_expense("trip", "A", "100", policy="custom", entries=[("A", "100")])
        with pytest.raises(SplitMismatchError):
            service.update_expense(expense.id, total="80")
        assert service.get_group_expenses("trip") == [expense]
        assert sink.get_recent_events()[0].event_type == AuditEventType.SPLIT_REJECTED

    @pytest.mark.parametrize("payer_id, total", [("", "30"), ("A", "abc")])
    def test_malformed_expense_is_audited_as_system_error(self, service, sink, payer_id, total):
        with pytest.raises(ValueError):
            service.add_expense("trip", payer_id, total, participant_ids=MEMBERS)
        assert service.get_group_expenses("trip") == []

        event = sink.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.details == {"operation": "add_expense", "group_id": "trip"}

    def test_malformed_update_is_audited_as_system_error(self, service, sink):
        expense = service.add_expense("trip", "A", "30", participant_ids=MEMBERS)
        with pytest.raises(ValueError):
            service.update_expense(expense.id, total="NaN")
        event = sink.get_recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details["expense_id"] == str(expense.id)

    def test_update_unknown_expense(self, service):
        with pytest.raises(NotFoundError):
            service.update_expense(uuid4(), total="10")

    def test_delete_expense(self, service, sink):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        removed = service.delete_expense(expense.id)
        assert removed == expense
        assert service.get_group_expenses("trip") == []
        assert sink.get_recent_events()[0].event_type == AuditEventType.EXPENSE_DELETED

        with pytest.raises(NotFoundError):
            service.delete_expense(expense.id)

    def test_clear_expenses_of_one_group(self, service, sink):
        service.add_expense("trip", "A", "30", participant_ids=MEMBERS)
        service.add_expense("trip", "B", "60", participant_ids=MEMBERS)
        kept = service.add_expense("flat", "C", "90", participant_ids=MEMBERS)

        assert service.clear_expenses("trip") == 2
        assert service.get_group_expenses("trip") == []
        assert service.get_group_expenses("flat") == [kept]

        event = sink.get_recent_events()[0]
        assert event.event_type == AuditEventType.EXPENSES_CLEARED
        assert event.details["removed_count"] == 2

    def test_mark_share_paid(self, service, sink):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        updated = service.mark_share_paid(expense.id, "B")
        assert updated.share_for("B").paid is True
        assert service.get_group_expenses("trip") == [updated]
        assert sink.get_recent_events()[0].event_type == AuditEventType.SHARE_MARKED_PAID

    def test_mark_share_paid_twice_is_silent(self, service, sink):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        service.mark_share_paid(expense.id, "B")
        count = len(sink.get_recent_events())
        service.mark_share_paid(expense.id, "B")
        service.mark_share_paid(expense.id, "Z")
        assert len(sink.get_recent_events()) == count


class TestReadSide:

    def test_balances_follow_edits(self, service):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        balances = {b.member_id: b for b in service.get_balances("trip", MEMBERS)}
        assert balances["A"].net_balance == Decimal("200.00")
        assert balances["B"].net_balance == Decimal("-100.00")

        service.delete_expense(expense.id)
        balances = service.get_balances("trip", MEMBERS)
        assert all(b.net_balance == 0 for b in balances)

    def test_suggest_settlements(self, service, sink):
        service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        correlation_id = uuid4()
        settlements = service.suggest_settlements("trip", MEMBERS, correlation_id=correlation_id)

        assert [(s.from_id, s.to_id, s.amount) for s in settlements] == [
            ("C", "A", Decimal("100.00")),
            ("B", "A", Decimal("100.00")),
        ]
        related = sink.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in related] == [
            AuditEventType.BALANCES_COMPUTED,
            AuditEventType.SETTLEMENTS_SUGGESTED,
        ]
        assert related[1].details["total_volume"] == "200.00"

    def test_paid_shares_shrink_suggestions(self, service):
        expense = service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        service.mark_share_paid(expense.id, "B")
        settlements = service.suggest_settlements("trip", MEMBERS)
        assert [(s.from_id, s.to_id) for s in settlements] == [("C", "A")]

    def test_strict_membership(self, service):
        service.add_expense("trip", "A", "40", participant_ids=["A", "X"])
        with pytest.raises(UnknownMemberError):
            service.get_balances("trip", MEMBERS, strict=True)

    def test_group_summary(self, service):
        service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        settlement = service.suggest_settlements("trip", MEMBERS)[0]
        service.record_settlement(settlement)
        service.mark_settlement_paid(settlement.id)

        summary = service.group_summary("trip")
        assert summary.total_expenses == Decimal("300.00")
        assert summary.total_settled == Decimal("100.00")
        assert summary.settlement_rate == Decimal("33.33")

    def test_member_summary(self, service):
        service.add_expense("trip", "A", "300", participant_ids=MEMBERS)
        for settlement in service.suggest_settlements("trip", MEMBERS):
            service.record_settlement(settlement)

        summary = service.member_summary("A", group_id="trip")
        assert summary.total_paid == Decimal("300.00")
        assert summary.total_share == Decimal("100.00")
        assert summary.amount_owed_to_member == Decimal("200.00")


class TestSettlementRecording:

    def test_record_and_pay(self, service, sink):
        settlement = Settlement(from_id="B", to_id="A", amount="100", group_id="trip")
        service.record_settlement(settlement)
        paid = service.mark_settlement_paid(settlement.id, transaction_ref="UPI-123")

        assert paid.is_paid is True
        assert paid.paid_at is not None
        assert paid.transaction_ref == "UPI-123"
        assert service.get_member_settlements("B") == [paid]
        assert event_types(sink) == [
            AuditEventType.SETTLEMENT_RECORDED,
            AuditEventType.SETTLEMENT_PAID,
        ]

    def test_record_twice(self, service):
        settlement = Settlement(from_id="B", to_id="A", amount="100")
        service.record_settlement(settlement)
        with pytest.raises(DuplicateError):
            service.record_settlement(settlement)

    def test_pay_unknown_settlement(self, service):
        with pytest.raises(NotFoundError):
            service.mark_settlement_paid(uuid4())

    def test_member_settlements_filtered(self, service):
        service.record_settlement(Settlement(from_id="B", to_id="A", amount="10", group_id="trip"))
        service.record_settlement(Settlement(from_id="C", to_id="A", amount="10", group_id="flat"))
        assert len(service.get_member_settlements("A")) == 2
        assert len(service.get_member_settlements("A", group_id="flat")) == 1
        assert service.get_member_settlements("B", group_id="flat") == []


class TestServiceDefaults:

    def test_works_without_sink(self):
        service = LedgerService()
        expense = service.add_expense("trip", "A", "10", participant_ids=["A"])
        assert service.get_group_expenses("trip") == [expense]
