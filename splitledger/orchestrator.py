"""
Ledger Service for SplitLedger

This module ties the pure ledger core to its collaborators and defines
the flows a front end drives:
1. Expense lifecycle (split -> validate -> save, edit, delete, mark paid)
2. Read side (balances -> settlement suggestions -> summaries)
3. Payment recording (suggestion -> recorded settlement -> paid)

DESIGN DECISION: The service owns every side effect:
- Storage reads and writes
- Audit events (the replacement for the app's notification popups)

The computation itself lives in splitledger.splits and splitledger.ledger
and receives immutable snapshots. Balances are recomputed from the stored
expenses on every call.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from uuid import UUID

from splitledger.audit import AuditLogger, configure_logging, create_correlation_id
from splitledger.ledger import (
    compute_balances,
    edit_expense,
    mark_share_paid,
    optimize_settlements,
    summarize_group,
    summarize_member,
)
from splitledger.models.audit import AuditEventBuilder
from splitledger.models.ledger import (
    ZERO,
    Balance,
    Expense,
    ExpenseItem,
    GroupSummary,
    MemberSummary,
    Settlement,
    SplitPolicy,
)
from splitledger.services.storage import (
    ExpenseStorageInterface,
    InMemoryAuditSink,
    InMemoryExpenseStorage,
    InMemorySettlementStorage,
    NotFoundError,
    SettlementStorageInterface,
)
from splitledger.splits import build_expense
from splitledger.splits.calculator import Entries
from splitledger.validation import SplitError


class LedgerService:
    """
    Orchestrates the expense ledger of one or more groups.

    Group membership is owned by the caller and passed in where needed;
    this service only keeps expenses and recorded settlements.
    """

    def __init__(
        self,
        expense_storage: Optional[ExpenseStorageInterface] = None,
        settlement_storage: Optional[SettlementStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._expenses = expense_storage or InMemoryExpenseStorage()
        self._settlements = settlement_storage or InMemorySettlementStorage()
        self._audit_logger = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Expense lifecycle
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        group_id: str,
        payer_id: str,
        total: Any,
        policy: SplitPolicy = SplitPolicy.EQUAL,
        participant_ids: Optional[Iterable[str]] = None,
        entries: Optional[Entries] = None,
        items: Optional[Iterable[ExpenseItem]] = None,
        title: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Split, validate and save a new expense.

        Raises:
            SplitError subclasses if the split is rejected (after auditing it)
            ValueError for malformed input such as a non-numeric total or
                an empty payer (audited as a system error)
        """
        correlation_id = correlation_id or create_correlation_id()
        policy = SplitPolicy(policy)

        try:
            expense = build_expense(
                group_id=group_id,
                payer_id=payer_id,
                total=total,
                policy=policy,
                participant_ids=participant_ids,
                entries=entries,
                items=items,
                title=title,
            )
        except SplitError as e:
            self._audit_logger.log(AuditEventBuilder.split_rejected(
                group_id=group_id,
                policy=policy.value,
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            raise
        except ValueError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "add_expense", "group_id": group_id},
                correlation_id=correlation_id,
            )
            raise

        self._expenses.save_expense(expense)

        self._audit_logger.log(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            group_id=group_id,
            payer_id=payer_id,
            amount=str(expense.total_amount),
            participant_count=len(expense.participants),
            correlation_id=correlation_id,
        ))
        return expense

    def update_expense(
        self,
        expense_id: UUID,
        total: Optional[Any] = None,
        payer_id: Optional[str] = None,
        title: Optional[str] = None,
        policy: Optional[SplitPolicy] = None,
        participant_ids: Optional[Iterable[str]] = None,
        entries: Optional[Entries] = None,
        items: Optional[Iterable[ExpenseItem]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Edit an expense; shares are recomputed and re-validated.

        Raises:
            NotFoundError: Unknown expense
            SplitError subclasses if the edited split is rejected
        """
        correlation_id = correlation_id or create_correlation_id()
        current = self._require_expense(expense_id)

        try:
            updated = edit_expense(
                current,
                total=total,
                payer_id=payer_id,
                title=title,
                policy=policy,
                participant_ids=participant_ids,
                entries=entries,
                items=items,
            )
        except SplitError as e:
            self._audit_logger.log(AuditEventBuilder.split_rejected(
                group_id=current.group_id,
                policy=SplitPolicy(policy or current.split_policy).value,
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            raise
        except ValueError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "update_expense", "expense_id": str(expense_id)},
                correlation_id=correlation_id,
            )
            raise

        self._expenses.update_expense(updated)

        changed = [
            field for field in ("total_amount", "payer_id", "title", "split_policy", "participants", "items")
            if getattr(current, field) != getattr(updated, field)
        ]
        self._audit_logger.log(AuditEventBuilder.expense_updated(
            expense_id=updated.id,
            group_id=updated.group_id,
            changed_fields=changed,
            correlation_id=correlation_id,
        ))
        return updated

    def delete_expense(
        self,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Delete an expense; its contribution disappears from every balance.

        Raises:
            NotFoundError: Unknown expense
        """
        removed = self._expenses.delete_expense(expense_id)
        self._audit_logger.log(AuditEventBuilder.expense_deleted(
            expense_id=removed.id,
            group_id=removed.group_id,
            amount=str(removed.total_amount),
            correlation_id=correlation_id,
        ))
        return removed

    def clear_expenses(
        self,
        group_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """Remove all expenses (of one group if given)."""
        removed = self._expenses.clear_expenses(group_id)
        self._audit_logger.log(AuditEventBuilder.expenses_cleared(
            removed_count=removed,
            group_id=group_id,
            correlation_id=correlation_id,
        ))
        return removed

    def mark_share_paid(
        self,
        expense_id: UUID,
        member_id: str,
        paid_at: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Record that a participant paid their share back to the payer.

        A member who does not participate, or already paid, leaves the
        expense unchanged.

        Raises:
            NotFoundError: Unknown expense
        """
        current = self._require_expense(expense_id)
        updated = mark_share_paid(current, member_id, paid_at)
        if updated is current:
            return current

        self._expenses.update_expense(updated)
        self._audit_logger.log(AuditEventBuilder.share_marked_paid(
            expense_id=updated.id,
            group_id=updated.group_id,
            member_id=member_id,
            correlation_id=correlation_id,
        ))
        return updated

    def get_group_expenses(self, group_id: str) -> list[Expense]:
        return self._expenses.list_expenses(group_id)

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def get_balances(
        self,
        group_id: str,
        members: Iterable[str],
        strict: Optional[bool] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Balance]:
        """
        Recompute every member's balance from the group's current expenses.

        Raises:
            UnknownMemberError: Only in strict mode
        """
        members = list(members)
        expenses = self._expenses.list_expenses(group_id)
        balances = compute_balances(members, expenses, group_id=group_id, strict=strict)

        self._audit_logger.log(AuditEventBuilder.balances_computed(
            group_id=group_id,
            member_count=len(balances),
            expense_count=len(expenses),
            correlation_id=correlation_id,
        ))
        return balances

    def suggest_settlements(
        self,
        group_id: str,
        members: Iterable[str],
        strict: Optional[bool] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Settlement]:
        """Suggest the transfers that would settle the group right now."""
        correlation_id = correlation_id or create_correlation_id()
        balances = self.get_balances(group_id, members, strict, correlation_id)
        settlements = optimize_settlements(balances)

        self._audit_logger.log(AuditEventBuilder.settlements_suggested(
            group_id=group_id,
            settlement_count=len(settlements),
            total_volume=str(sum((s.amount for s in settlements), ZERO)),
            correlation_id=correlation_id,
        ))
        return settlements

    def group_summary(self, group_id: str) -> GroupSummary:
        return summarize_group(
            self._expenses.list_expenses(group_id),
            self._settlements.list_settlements(group_id=group_id),
            group_id=group_id,
        )

    def member_summary(self, member_id: str, group_id: Optional[str] = None) -> MemberSummary:
        return summarize_member(
            member_id,
            self._expenses.list_expenses(group_id),
            self._settlements.list_settlements(member_id=member_id, group_id=group_id),
        )

    # -------------------------------------------------------------------------
    # Payment recording
    # -------------------------------------------------------------------------

    def record_settlement(
        self,
        settlement: Settlement,
        correlation_id: Optional[UUID] = None,
    ) -> Settlement:
        """
        Keep a settlement the members decided to act on.

        Raises:
            DuplicateError: The settlement was already recorded
        """
        saved = self._settlements.save_settlement(settlement)
        self._audit_logger.log(AuditEventBuilder.settlement_recorded(
            settlement_id=saved.id,
            group_id=saved.group_id,
            from_id=saved.from_id,
            to_id=saved.to_id,
            amount=str(saved.amount),
            correlation_id=correlation_id,
        ))
        return saved

    def mark_settlement_paid(
        self,
        settlement_id: UUID,
        transaction_ref: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Settlement:
        """
        Mark a recorded settlement as paid.

        Raises:
            NotFoundError: The settlement was never recorded
        """
        current = self._settlements.get_settlement(settlement_id)
        if current is None:
            raise NotFoundError(f"Settlement {settlement_id} not found")

        paid = current.model_copy(update={
            "is_paid": True,
            "paid_at": datetime.now(timezone.utc),
            "transaction_ref": transaction_ref,
        })
        self._settlements.update_settlement(paid)
        self._audit_logger.log(AuditEventBuilder.settlement_paid(
            settlement_id=paid.id,
            group_id=paid.group_id,
            transaction_ref=transaction_ref,
            correlation_id=correlation_id,
        ))
        return paid

    def get_member_settlements(
        self,
        member_id: str,
        group_id: Optional[str] = None,
    ) -> list[Settlement]:
        return self._settlements.list_settlements(member_id=member_id, group_id=group_id)

    def _require_expense(self, expense_id: UUID) -> Expense:
        expense = self._expenses.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(f"Expense {expense_id} not found")
        return expense


def create_ledger_service(
    configure: bool = True,
) -> tuple[LedgerService, InMemoryAuditSink]:
    """
    Factory function to create a ledger service with in-memory collaborators.

    Args:
        configure: Whether to configure structlog from settings.
                   Set to False when the host application does it.

    Returns:
        (ledger_service, audit_sink)
    """
    if configure:
        configure_logging()

    audit_sink = InMemoryAuditSink()
    service = LedgerService(
        expense_storage=InMemoryExpenseStorage(),
        settlement_storage=InMemorySettlementStorage(),
        audit_logger=AuditLogger(audit_sink),
    )
    return service, audit_sink
