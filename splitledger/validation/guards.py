"""
Participant Share Guards

Checks the invariants every share set must satisfy before an expense
is accepted into the ledger:

1. At least one participant
2. Shares add up to the expense total (within tolerance)
3. No share is negative

Used by the split calculator and by any caller that edits shares
directly (e.g., adding or removing a participant while editing an expense).

IMPORTANT: Guards NEVER fix shares. They report or raise.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional

from splitledger.config import get_settings
from splitledger.models.ledger import (
    ParticipantShare,
    ShareValidationResult,
    to_decimal,
    to_money,
)


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class SplitError(ValueError):
    """Base exception for share sets that cannot be accepted."""
    pass


class EmptyParticipantSetError(SplitError):
    """An expense or item has no participants."""

    def __init__(self, message: str = "At least one participant is required"):
        super().__init__(message)


class NegativeShareError(SplitError):
    """A share, item amount, total or percentage is negative."""
    pass


class SplitMismatchError(SplitError):
    """Share amounts do not reconcile with the expense total."""

    def __init__(self, expected: Decimal, actual: Decimal, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message
            or f"Participant amounts ({actual}) do not match total amount ({expected})"
        )


class PercentageSumError(SplitError):
    """Percentages do not add up to 100."""

    def __init__(self, actual: Decimal):
        self.actual = actual
        super().__init__(f"Percentages add up to {actual}%, expected 100%")


class UnknownMemberError(ValueError):
    """An expense references a member outside the group (strict mode only)."""

    def __init__(self, member_id: str, expense_id: Any = None):
        self.member_id = member_id
        self.expense_id = expense_id
        super().__init__(
            f"Expense {expense_id} references unknown member {member_id!r}"
        )


# =============================================================================
# GUARDS
# =============================================================================

def resolve_tolerance(tolerance: Optional[Decimal] = None) -> Decimal:
    """Explicit tolerance if given, otherwise the configured one."""
    if tolerance is not None:
        return to_decimal(tolerance)
    return get_settings().ledger.amount_tolerance


def validate_participants(
    total: Any,
    shares: Iterable[ParticipantShare],
    tolerance: Optional[Decimal] = None,
) -> ShareValidationResult:
    """
    Check a share set against an expense total.

    Checks run in order (empty set, sum vs. total, negative amounts) and
    the first failure is reported.

    Returns:
        ShareValidationResult with valid=False and a human-readable error
        if any check fails
    """
    shares = list(shares)
    if not shares:
        return ShareValidationResult(
            valid=False,
            error="At least one participant is required",
        )

    symbol = get_settings().ledger.currency_symbol
    total = to_money(total)
    share_sum = sum((share.amount for share in shares), Decimal("0.00"))

    if abs(total - share_sum) > resolve_tolerance(tolerance):
        return ShareValidationResult(
            valid=False,
            error=(
                f"Participant amounts ({symbol}{share_sum:.2f}) do not match "
                f"total amount ({symbol}{total:.2f})"
            ),
        )

    if any(share.amount < 0 for share in shares):
        return ShareValidationResult(
            valid=False,
            error="Participant amounts cannot be negative",
        )

    return ShareValidationResult(valid=True)


def check_participants(
    total: Any,
    shares: Iterable[ParticipantShare],
    tolerance: Optional[Decimal] = None,
) -> None:
    """
    Raising variant of validate_participants.

    Raises:
        EmptyParticipantSetError: No shares
        NegativeShareError: Any share below zero
        SplitMismatchError: Shares do not add up to the total
    """
    shares = list(shares)
    if not shares:
        raise EmptyParticipantSetError()

    # Negative amounts are reported before the sum
    for share in shares:
        if share.amount < 0:
            raise NegativeShareError(
                f"Share of {share.member_id} is negative: {share.amount}"
            )

    total = to_money(total)
    share_sum = sum((share.amount for share in shares), Decimal("0.00"))
    if abs(total - share_sum) > resolve_tolerance(tolerance):
        raise SplitMismatchError(expected=total, actual=share_sum)
