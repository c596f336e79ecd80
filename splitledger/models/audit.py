"""
Audit Models for SplitLedger

Every ledger mutation and every derived result handed to a caller is
logged for audit purposes. This provides:
1. Traceability of who changed which expense
2. Debugging information when balances look wrong
3. A replacement for the ad-hoc notifications of the mobile app

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense lifecycle
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_CLEARED = "expenses_cleared"
    SHARE_MARKED_PAID = "share_marked_paid"
    SPLIT_REJECTED = "split_rejected"

    # Derived results
    BALANCES_COMPUTED = "balances_computed"
    SETTLEMENTS_SUGGESTED = "settlements_suggested"

    # Payments recorded outside the core
    SETTLEMENT_RECORDED = "settlement_recorded"
    SETTLEMENT_PAID = "settlement_paid"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant ledger action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'settlement', 'group')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    group_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., an edit and its recompute)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "group_id": self.group_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, group_id, ...)
        event = AuditEventBuilder.settlements_suggested(group_id, 3, "250.00")
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        group_id: str,
        payer_id: str,
        amount: str,
        participant_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=str(expense_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Expense of {amount} added, split between {participant_count} members",
            details={
                "payer_id": payer_id,
                "amount": amount,
                "participant_count": participant_count,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: UUID,
        group_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=str(expense_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        group_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=str(expense_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Expense of {amount} deleted",
            details={"amount": amount},
        )

    @staticmethod
    def expenses_cleared(
        removed_count: int,
        group_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="group" if group_id else None,
            entity_id=group_id,
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"{removed_count} expenses cleared",
            details={"removed_count": removed_count},
        )

    @staticmethod
    def share_marked_paid(
        expense_id: UUID,
        group_id: str,
        member_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_MARKED_PAID,
            entity_type="expense",
            entity_id=str(expense_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Share of {member_id} marked as paid",
            details={"member_id": member_id},
        )

    @staticmethod
    def split_rejected(
        group_id: str,
        policy: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="group",
            entity_id=group_id,
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"{policy.capitalize()} split rejected: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details={"policy": policy},
        )

    @staticmethod
    def balances_computed(
        group_id: str,
        member_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCES_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="group",
            entity_id=group_id,
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Balances computed for {member_count} members from {expense_count} expenses",
            details={
                "member_count": member_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def settlements_suggested(
        group_id: str,
        settlement_count: int,
        total_volume: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENTS_SUGGESTED,
            entity_type="group",
            entity_id=group_id,
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"{settlement_count} settlements suggested totalling {total_volume}",
            details={
                "settlement_count": settlement_count,
                "total_volume": total_volume,
            },
        )

    @staticmethod
    def settlement_recorded(
        settlement_id: UUID,
        group_id: Optional[str],
        from_id: str,
        to_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_RECORDED,
            entity_type="settlement",
            entity_id=str(settlement_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description=f"Settlement recorded: {from_id} pays {to_id} {amount}",
            details={
                "from_id": from_id,
                "to_id": to_id,
                "amount": amount,
            },
        )

    @staticmethod
    def settlement_paid(
        settlement_id: UUID,
        group_id: Optional[str],
        transaction_ref: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_PAID,
            entity_type="settlement",
            entity_id=str(settlement_id),
            group_id=group_id,
            correlation_id=correlation_id,
            description="Settlement marked as paid",
            details={"transaction_ref": transaction_ref},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
