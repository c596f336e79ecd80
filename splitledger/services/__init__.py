"""Services package."""

from splitledger.services.storage import (
    AuditSinkInterface,
    DuplicateError,
    ExpenseStorageInterface,
    InMemoryAuditSink,
    InMemoryExpenseStorage,
    InMemorySettlementStorage,
    NotFoundError,
    SettlementStorageInterface,
    StorageError,
)

__all__ = [
    "AuditSinkInterface",
    "DuplicateError",
    "ExpenseStorageInterface",
    "InMemoryAuditSink",
    "InMemoryExpenseStorage",
    "InMemorySettlementStorage",
    "NotFoundError",
    "SettlementStorageInterface",
    "StorageError",
]
