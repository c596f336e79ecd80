"""
Abstract Storage Interface

DESIGN DECISION: The ledger core never stores anything. Expenses and
recorded settlements live behind these interfaces, owned by the caller.
This allows us to:
1. Keep the computation pure and trivially testable
2. Use in-memory storage for tests and small tools
3. Plug in a real database later without touching the core

The interface is intentionally simple - just the operations the
ledger service needs. All calls are synchronous.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from splitledger.models.audit import AuditEvent
from splitledger.models.ledger import Expense, Settlement


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Expenses are the source of truth of the ledger.
    """

    @abstractmethod
    def save_expense(self, expense: Expense) -> Expense:
        """
        Save a new expense.

        Raises:
            DuplicateError: If an expense with the same ID exists
        """
        pass

    @abstractmethod
    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        """
        Retrieve an expense by its ID.

        Returns:
            The expense if found, None otherwise
        """
        pass

    @abstractmethod
    def update_expense(self, expense: Expense) -> Expense:
        """
        Replace a stored expense with a new snapshot (matched by ID).

        Raises:
            NotFoundError: If the expense doesn't exist
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: UUID) -> Expense:
        """
        Remove an expense and return the removed snapshot.

        Raises:
            NotFoundError: If the expense doesn't exist
        """
        pass

    @abstractmethod
    def list_expenses(self, group_id: Optional[str] = None) -> list[Expense]:
        """
        List expenses in insertion order.

        Args:
            group_id: Only this group's expenses if given
        """
        pass

    @abstractmethod
    def clear_expenses(self, group_id: Optional[str] = None) -> int:
        """
        Remove all expenses (of one group if given).

        Returns:
            Number of expenses removed
        """
        pass


class SettlementStorageInterface(ABC):
    """
    Abstract interface for recorded settlements.

    Only settlements a member chose to act on are stored here;
    suggestions from the optimizer are not persisted by themselves.
    """

    @abstractmethod
    def save_settlement(self, settlement: Settlement) -> Settlement:
        """
        Save a settlement.

        Raises:
            DuplicateError: If a settlement with the same ID exists
        """
        pass

    @abstractmethod
    def get_settlement(self, settlement_id: UUID) -> Optional[Settlement]:
        """Retrieve a settlement by ID, or None."""
        pass

    @abstractmethod
    def update_settlement(self, settlement: Settlement) -> Settlement:
        """
        Replace a stored settlement with a new snapshot.

        Raises:
            NotFoundError: If the settlement doesn't exist
        """
        pass

    @abstractmethod
    def list_settlements(
        self,
        member_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> list[Settlement]:
        """
        List settlements in insertion order.

        Args:
            member_id: Only settlements this member pays or receives
            group_id: Only settlements of this group
        """
        pass


class AuditSinkInterface(ABC):
    """
    Abstract interface for audit event storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if stored successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """Get all events for a correlation ID in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
