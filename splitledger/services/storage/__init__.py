"""
Storage Services Package

Provides abstract interfaces and in-memory implementations for the
records that live outside the pure ledger core.
"""

from splitledger.services.storage.interface import (
    AuditSinkInterface,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    SettlementStorageInterface,
    StorageError,
)
from splitledger.services.storage.memory import (
    InMemoryAuditSink,
    InMemoryExpenseStorage,
    InMemorySettlementStorage,
)

__all__ = [
    # Interfaces
    "AuditSinkInterface",
    "ExpenseStorageInterface",
    "SettlementStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditSink",
    "InMemoryExpenseStorage",
    "InMemorySettlementStorage",
]
