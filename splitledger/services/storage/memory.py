"""
In-Memory Storage

Insertion-ordered dict-backed implementations of the storage interfaces.
Good for tests, scripts and single-process tools. Not thread-safe:
one writer at a time.
"""

from typing import Optional
from uuid import UUID

from splitledger.models.audit import AuditEvent
from splitledger.models.ledger import Expense, Settlement
from splitledger.services.storage.interface import (
    AuditSinkInterface,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    SettlementStorageInterface,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expense storage in a plain dict keyed by expense ID."""

    def __init__(self):
        self._expenses: dict[UUID, Expense] = {}

    def save_expense(self, expense: Expense) -> Expense:
        if expense.id in self._expenses:
            raise DuplicateError(f"Expense {expense.id} already exists")
        self._expenses[expense.id] = expense
        return expense

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        return self._expenses.get(expense_id)

    def update_expense(self, expense: Expense) -> Expense:
        if expense.id not in self._expenses:
            raise NotFoundError(f"Expense {expense.id} not found")
        self._expenses[expense.id] = expense
        return expense

    def delete_expense(self, expense_id: UUID) -> Expense:
        try:
            return self._expenses.pop(expense_id)
        except KeyError:
            raise NotFoundError(f"Expense {expense_id} not found") from None

    def list_expenses(self, group_id: Optional[str] = None) -> list[Expense]:
        return [
            expense for expense in self._expenses.values()
            if group_id is None or expense.group_id == group_id
        ]

    def clear_expenses(self, group_id: Optional[str] = None) -> int:
        doomed = [expense.id for expense in self.list_expenses(group_id)]
        for expense_id in doomed:
            del self._expenses[expense_id]
        return len(doomed)


class InMemorySettlementStorage(SettlementStorageInterface):
    """Settlement storage in a plain dict keyed by settlement ID."""

    def __init__(self):
        self._settlements: dict[UUID, Settlement] = {}

    def save_settlement(self, settlement: Settlement) -> Settlement:
        if settlement.id in self._settlements:
            raise DuplicateError(f"Settlement {settlement.id} already exists")
        self._settlements[settlement.id] = settlement
        return settlement

    def get_settlement(self, settlement_id: UUID) -> Optional[Settlement]:
        return self._settlements.get(settlement_id)

    def update_settlement(self, settlement: Settlement) -> Settlement:
        if settlement.id not in self._settlements:
            raise NotFoundError(f"Settlement {settlement.id} not found")
        self._settlements[settlement.id] = settlement
        return settlement

    def list_settlements(
        self,
        member_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> list[Settlement]:
        return [
            s for s in self._settlements.values()
            if (member_id is None or member_id in (s.from_id, s.to_id))
            and (group_id is None or s.group_id == group_id)
        ]


class InMemoryAuditSink(AuditSinkInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
