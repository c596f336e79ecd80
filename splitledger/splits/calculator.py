"""
Split Calculator

Allocates an expense total into per-participant shares.

POLICIES:
- equal: total / n, leftover cents go to the first participants in list order
- custom: amounts taken as given, must add up to the total
- percentage: each share is total * pct / 100, percentages must add up to 100
- itemized: every line item is split equally among its own participants

All arithmetic is Decimal and rounded half-up to the cent after every
step, so an equal split always adds up to the total exactly.

IMPORTANT: A split that cannot be reconciled is rejected, never adjusted.
Only the equal policy redistributes (its own rounding remainder).
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional, Union
from uuid import UUID

import structlog

from splitledger.config import get_settings
from splitledger.models.ledger import (
    CENT,
    ZERO,
    Expense,
    ExpenseItem,
    ParticipantShare,
    SplitPolicy,
    to_decimal,
    to_money,
)
from splitledger.validation.guards import (
    EmptyParticipantSetError,
    NegativeShareError,
    PercentageSumError,
    SplitMismatchError,
    check_participants,
    resolve_tolerance,
)


logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")

Entries = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


def _pairs(entries: Entries) -> list[tuple[str, Any]]:
    """Normalize a mapping or an iterable of pairs into an ordered list of pairs."""
    if isinstance(entries, Mapping):
        return list(entries.items())
    return [(member_id, value) for member_id, value in entries]


def _check_total(total: Decimal) -> None:
    if total < 0:
        raise NegativeShareError(f"Total amount cannot be negative: {total}")


def equal_split(total: Any, participant_ids: Iterable[str]) -> list[ParticipantShare]:
    """
    Split a total equally.

    Each participant gets total / n rounded to the cent. The rounding
    remainder is handed out one cent at a time starting from the first
    participant, so the result is deterministic but order-dependent.

    Example:
        equal_split("100.00", ["A", "B", "C"]) -> 33.34, 33.33, 33.33

    Raises:
        EmptyParticipantSetError: No participants
        NegativeShareError: Negative total
    """
    ids = list(participant_ids)
    n = len(ids)
    if n == 0:
        raise EmptyParticipantSetError()

    total = to_money(total)
    _check_total(total)

    base = (total / n).quantize(CENT, rounding=ROUND_HALF_UP)
    amounts = [base] * n

    diff = total - base * n
    step = CENT if diff > 0 else -CENT
    i = 0
    while diff != 0 and i < n:
        amounts[i] += step
        diff -= step
        i += 1

    return [
        ParticipantShare(member_id=member_id, amount=amount)
        for member_id, amount in zip(ids, amounts)
    ]


def custom_split(
    total: Any,
    entries: Entries,
    tolerance: Optional[Decimal] = None,
) -> list[ParticipantShare]:
    """
    Take explicit per-member amounts.

    Args:
        total: Expense total
        entries: (member_id, amount) pairs or an ordered mapping
        tolerance: Allowed gap between sum and total (defaults to settings)

    Raises:
        EmptyParticipantSetError: No entries
        NegativeShareError: Negative total or amount
        SplitMismatchError: Amounts do not add up to the total
    """
    total = to_money(total)
    _check_total(total)

    shares = []
    for member_id, amount in _pairs(entries):
        amount = to_money(amount)
        if amount < 0:
            raise NegativeShareError(f"Amount for {member_id} cannot be negative: {amount}")
        shares.append(ParticipantShare(member_id=member_id, amount=amount))

    check_participants(total, shares, tolerance)
    return shares


def percentage_split(
    total: Any,
    entries: Entries,
    tolerance: Optional[Decimal] = None,
) -> list[ParticipantShare]:
    """
    Split a total by percentage.

    Each share is round(total * percentage / 100, 2). The rounded shares
    are returned as computed and may drift from the total; build_expense
    and edit_expense check them before an Expense is created.

    Raises:
        EmptyParticipantSetError: No entries
        NegativeShareError: Negative total or percentage
        PercentageSumError: Percentages do not add up to 100
    """
    total = to_money(total)
    _check_total(total)

    percentages = []
    for member_id, percentage in _pairs(entries):
        percentage = to_decimal(percentage)
        if percentage < 0:
            raise NegativeShareError(
                f"Percentage for {member_id} cannot be negative: {percentage}"
            )
        percentages.append((member_id, percentage))

    if not percentages:
        raise EmptyParticipantSetError()

    percentage_sum = sum((p for _, p in percentages), Decimal("0"))
    if abs(percentage_sum - HUNDRED) > resolve_tolerance(tolerance):
        raise PercentageSumError(percentage_sum)

    return [
        ParticipantShare(
            member_id=member_id,
            amount=(total * percentage / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP),
        )
        for member_id, percentage in percentages
    ]


def itemized_split(
    total: Any,
    items: Iterable[ExpenseItem],
    tolerance: Optional[Decimal] = None,
) -> list[ParticipantShare]:
    """
    Split line items among the members who shared them.

    Every item is split with equal_split among its own participants.
    A member's share is the sum over the items they took part in;
    members are ordered by first appearance.

    Raises:
        EmptyParticipantSetError: No items, or an item nobody shares
        NegativeShareError: Negative total or item amount
        SplitMismatchError: Items do not add up to the total
    """
    total = to_money(total)
    _check_total(total)

    items = list(items)
    if not items:
        raise EmptyParticipantSetError("At least one item is required")

    per_member: dict[str, Decimal] = {}
    for item in items:
        if item.amount < 0:
            raise NegativeShareError(
                f"Item '{item.description}' has negative amount: {item.amount}"
            )
        if not item.participant_ids:
            raise EmptyParticipantSetError(
                f"Item '{item.description}' has no participants"
            )
        for share in equal_split(item.amount, item.participant_ids):
            per_member[share.member_id] = per_member.get(share.member_id, ZERO) + share.amount

    item_sum = sum((item.amount for item in items), ZERO)
    if abs(item_sum - total) > resolve_tolerance(tolerance):
        raise SplitMismatchError(
            expected=total,
            actual=item_sum,
            message=f"Item amounts ({item_sum}) do not match total amount ({total})",
        )

    shares = [
        ParticipantShare(member_id=member_id, amount=amount)
        for member_id, amount in per_member.items()
    ]
    check_participants(total, shares, tolerance)
    return shares


def split(
    policy: SplitPolicy,
    total: Any,
    participant_ids: Optional[Iterable[str]] = None,
    entries: Optional[Entries] = None,
    items: Optional[Iterable[ExpenseItem]] = None,
    tolerance: Optional[Decimal] = None,
) -> list[ParticipantShare]:
    """Dispatch to the calculator for the given policy."""
    policy = SplitPolicy(policy)
    if policy == SplitPolicy.EQUAL:
        return equal_split(total, participant_ids or [])
    elif policy == SplitPolicy.CUSTOM:
        return custom_split(total, entries or [], tolerance)
    elif policy == SplitPolicy.PERCENTAGE:
        return percentage_split(total, entries or [], tolerance)
    else:
        return itemized_split(total, items or [], tolerance)


def mark_payer_paid(
    shares: list[ParticipantShare],
    payer_id: str,
    paid_at: Optional[datetime] = None,
) -> list[ParticipantShare]:
    """Mark the payer's own share as paid; the payer never owes themself."""
    paid_at = paid_at or datetime.now(timezone.utc)
    return [
        share.model_copy(update={"paid": True, "paid_at": paid_at})
        if share.member_id == payer_id and not share.paid
        else share
        for share in shares
    ]


def build_expense(
    group_id: str,
    payer_id: str,
    total: Any,
    policy: SplitPolicy = SplitPolicy.EQUAL,
    participant_ids: Optional[Iterable[str]] = None,
    entries: Optional[Entries] = None,
    items: Optional[Iterable[ExpenseItem]] = None,
    title: str = "",
    mark_payer_share_paid: Optional[bool] = None,
    tolerance: Optional[Decimal] = None,
    expense_id: Optional[UUID] = None,
) -> Expense:
    """
    Split a total under a policy and wrap the shares into an Expense.

    Args:
        group_id: Group the expense belongs to
        payer_id: Member who paid the total
        total: Total amount
        policy: Split policy to apply
        participant_ids: Members for the equal policy
        entries: (member_id, value) pairs for custom and percentage
        items: Line items for the itemized policy
        title: Short description
        mark_payer_share_paid: Mark the payer's own share as paid
            (defaults to settings)
        tolerance: Allowed rounding gap (defaults to settings)
        expense_id: Keep an existing ID (used when re-splitting on edit)

    Raises:
        SplitError subclasses when the split cannot be accepted
    """
    settings = get_settings().ledger
    items = list(items) if items is not None else []

    shares = split(
        policy,
        total,
        participant_ids=participant_ids,
        entries=entries,
        items=items,
        tolerance=tolerance,
    )

    if mark_payer_share_paid is None:
        mark_payer_share_paid = settings.mark_payer_share_paid
    if mark_payer_share_paid:
        shares = mark_payer_paid(shares, payer_id)

    if SplitPolicy(policy) == SplitPolicy.PERCENTAGE:
        check_participants(total, shares, tolerance)

    fields = {
        "group_id": group_id,
        "payer_id": payer_id,
        "title": title,
        "total_amount": to_money(total),
        "currency": settings.currency,
        "split_policy": SplitPolicy(policy),
        "participants": shares,
        "items": items if SplitPolicy(policy) == SplitPolicy.ITEMIZED else [],
    }
    if expense_id is not None:
        fields["id"] = expense_id

    expense = Expense(**fields)
    logger.debug(
        "expense_built",
        expense_id=str(expense.id),
        policy=expense.split_policy.value,
        total=str(expense.total_amount),
        participants=len(shares),
    )
    return expense
