"""
Core Data Models for SplitLedger

These models define the strict schemas for all data flowing through the
ledger. They are designed to:
1. Keep money exact (Decimal, two fractional digits, half-up rounding)
2. Be immutable snapshots (edits produce new instances)
3. Provide clear validation error messages
4. Be serializable for storage and logging

DESIGN DECISION: Expenses are the only primary state.
Balances and settlements are derived on demand and never cached.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)


CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric input to an exact Decimal without rounding.

    Floats go through str() so that 0.1 becomes Decimal("0.1"),
    not its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"Not a numeric amount: {value!r}") from None
    else:
        raise ValueError(f"Not a numeric amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return result


def to_money(value: Any) -> Decimal:
    """Convert a numeric input to Money: a Decimal with exactly two places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


Money = Annotated[Decimal, BeforeValidator(to_money)]
Percentage = Annotated[Decimal, BeforeValidator(to_decimal)]


# =============================================================================
# ENUMS
# =============================================================================

class SplitPolicy(str, Enum):
    """How an expense total is divided into participant shares."""
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"
    ITEMIZED = "itemized"


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ParticipantShare(BaseModel):
    """
    One participant's part of an expense.

    Owned by the Expense that created it. Only "mark paid" or a full
    expense edit changes it, and both produce a new instance.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    member_id: str = Field(
        ...,
        min_length=1,
        description="Member who owes this share"
    )
    amount: Money = Field(
        ...,
        description="Share amount"
    )
    paid: bool = Field(
        default=False,
        description="Has this share been paid back to the payer?"
    )
    paid_at: Optional[datetime] = None


class ExpenseItem(BaseModel):
    """A line item of an itemized expense, shared equally by its participants."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    description: str = Field(
        default="",
        max_length=200
    )
    amount: Money = Field(
        ...,
        description="Item amount"
    )
    participant_ids: list[str] = Field(
        default_factory=list,
        description="Members sharing this item"
    )


class Expense(BaseModel):
    """
    A shared expense paid by one member and split among participants.

    CRITICAL: This is the authoritative record of the ledger.
    Every Expense satisfies:
    - participants is non-empty
    - every share amount is >= 0
    - sum of shares is within tolerance of total_amount
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    group_id: str = Field(
        ...,
        min_length=1,
        description="Group this expense belongs to"
    )

    # Who paid what
    payer_id: str = Field(
        ...,
        min_length=1,
        description="Member who paid the full amount"
    )
    title: str = Field(
        default="",
        max_length=200
    )
    total_amount: Money = Field(
        ...,
        description="Total amount paid"
    )
    currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3
    )

    # How it is split
    split_policy: SplitPolicy = SplitPolicy.EQUAL
    participants: list[ParticipantShare] = Field(
        default_factory=list,
        description="Ordered participant shares"
    )
    items: list[ExpenseItem] = Field(
        default_factory=list,
        description="Line items (itemized policy only)"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode='after')
    def validate_shares(self) -> 'Expense':
        """Enforce the share invariants through the validation guards."""
        from splitledger.validation.guards import validate_participants

        result = validate_participants(self.total_amount, self.participants)
        if not result.valid:
            raise ValueError(result.error)
        return self

    def share_for(self, member_id: str) -> Optional[ParticipantShare]:
        """Get a member's share, if they participate in this expense."""
        for share in self.participants:
            if share.member_id == member_id:
                return share
        return None


# =============================================================================
# DERIVED MODELS
# =============================================================================

class Balance(BaseModel):
    """
    A member's position within a group.

    net_balance > 0 means the member is owed money,
    net_balance < 0 means the member owes money.
    """
    model_config = ConfigDict(frozen=True)

    member_id: str
    group_id: Optional[str] = None
    total_owed: Money = ZERO
    total_lent: Money = ZERO
    net_balance: Money = ZERO


class Settlement(BaseModel):
    """
    A suggested transfer from a debtor to a creditor.

    CRITICAL: This is a suggestion, not a payment.
    It only becomes a payment record through an explicit external action.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    from_id: str = Field(
        ...,
        description="Debtor who should pay"
    )
    to_id: str = Field(
        ...,
        description="Creditor who should receive"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Amount to transfer"
    )
    group_id: Optional[str] = None

    # Filled in only when a payment is recorded outside the core
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    transaction_ref: Optional[str] = Field(
        default=None,
        max_length=100,
        description="External payment reference (e.g., UPI transaction ID)"
    )
    created_at: datetime = Field(default_factory=_utcnow)


class ShareValidationResult(BaseModel):
    """Outcome of checking a participant share set."""
    model_config = ConfigDict(frozen=True)

    valid: bool
    error: Optional[str] = None


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class GroupSummary(BaseModel):
    """Totals across a group's expenses and recorded settlements."""
    model_config = ConfigDict(frozen=True)

    group_id: Optional[str] = None
    total_expenses: Money = ZERO
    total_settled: Money = ZERO
    total_pending: Money = ZERO
    settlement_rate: Money = Field(
        default=ZERO,
        description="Settled amount as a percentage of total expenses"
    )


class MemberSummary(BaseModel):
    """One member's view across expenses and recorded settlements."""
    model_config = ConfigDict(frozen=True)

    member_id: str
    total_paid: Money = ZERO
    total_share: Money = ZERO
    net_balance: Money = ZERO
    amount_owed_to_member: Money = ZERO
    amount_member_owes: Money = ZERO
