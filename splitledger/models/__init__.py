"""
Data Models Package

This package contains all Pydantic models used in SplitLedger.
All data flowing through the ledger must conform to these schemas.
"""

from splitledger.models.ledger import (
    CENT,
    ZERO,
    Balance,
    Expense,
    ExpenseItem,
    GroupSummary,
    MemberSummary,
    Money,
    ParticipantShare,
    Percentage,
    Settlement,
    ShareValidationResult,
    SplitPolicy,
    to_decimal,
    to_money,
)
from splitledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CENT",
    "ZERO",
    "Balance",
    "Expense",
    "ExpenseItem",
    "GroupSummary",
    "MemberSummary",
    "Money",
    "ParticipantShare",
    "Percentage",
    "Settlement",
    "ShareValidationResult",
    "SplitPolicy",
    "to_decimal",
    "to_money",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
