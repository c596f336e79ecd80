"""
Expense Edits

Pure functions that produce a new Expense from an existing one.
The caller swaps the new snapshot into its store; the old one is
never modified.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from splitledger.config import get_settings
from splitledger.models.ledger import (
    Expense,
    ExpenseItem,
    ParticipantShare,
    SplitPolicy,
    to_money,
)
from splitledger.splits.calculator import (
    Entries,
    equal_split,
    itemized_split,
    mark_payer_paid,
    split,
)
from splitledger.validation.guards import check_participants


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def mark_share_paid(
    expense: Expense,
    member_id: str,
    paid_at: Optional[datetime] = None,
) -> Expense:
    """
    Mark one participant's share as paid.

    Returns the expense unchanged if the member does not participate
    or has already paid.
    """
    share = expense.share_for(member_id)
    if share is None or share.paid:
        return expense

    paid_at = paid_at or _utcnow()
    participants = [
        s.model_copy(update={"paid": True, "paid_at": paid_at})
        if s.member_id == member_id
        else s
        for s in expense.participants
    ]
    return expense.model_copy(update={"participants": participants, "updated_at": paid_at})


def replace_participants(
    expense: Expense,
    shares: Iterable[ParticipantShare],
    tolerance: Optional[Decimal] = None,
) -> Expense:
    """
    Swap in a hand-edited share set (e.g., a participant added or removed).

    Raises:
        EmptyParticipantSetError, NegativeShareError, SplitMismatchError
    """
    shares = list(shares)
    check_participants(expense.total_amount, shares, tolerance)
    return expense.model_copy(update={"participants": shares, "updated_at": _utcnow()})


def edit_expense(
    expense: Expense,
    total: Optional[Any] = None,
    payer_id: Optional[str] = None,
    title: Optional[str] = None,
    policy: Optional[SplitPolicy] = None,
    participant_ids: Optional[Iterable[str]] = None,
    entries: Optional[Entries] = None,
    items: Optional[Iterable[ExpenseItem]] = None,
    tolerance: Optional[Decimal] = None,
) -> Expense:
    """
    Apply an edit and recompute the shares.

    Shares are recomputed under the (possibly new) policy:
    - equal: re-split among participant_ids, or the current participants
    - itemized: re-split the given items, or the current items
    - custom / percentage: re-split the given entries; without entries
      the current amounts are kept and must still match the total

    Members present before and after the edit keep their paid state.

    Raises:
        SplitError subclasses when the edited split cannot be accepted
    """
    policy = SplitPolicy(policy) if policy is not None else expense.split_policy
    total = to_money(total) if total is not None else expense.total_amount
    payer_id = payer_id or expense.payer_id
    current_ids = [share.member_id for share in expense.participants]
    kept_items: list[ExpenseItem] = []

    if policy == SplitPolicy.EQUAL:
        ids = list(participant_ids) if participant_ids is not None else current_ids
        shares = equal_split(total, ids)
    elif policy == SplitPolicy.ITEMIZED:
        kept_items = list(items) if items is not None else list(expense.items)
        shares = itemized_split(total, kept_items, tolerance)
    elif entries is not None:
        shares = split(policy, total, entries=entries, tolerance=tolerance)
        if policy == SplitPolicy.PERCENTAGE:
            check_participants(total, shares, tolerance)
    else:
        shares = [
            ParticipantShare(member_id=share.member_id, amount=share.amount)
            for share in expense.participants
        ]
        check_participants(total, shares, tolerance)

    previous = {share.member_id: share for share in expense.participants}
    shares = [
        share.model_copy(update={
            "paid": previous[share.member_id].paid,
            "paid_at": previous[share.member_id].paid_at,
        })
        if share.member_id in previous
        else share
        for share in shares
    ]
    if get_settings().ledger.mark_payer_share_paid:
        shares = mark_payer_paid(shares, payer_id)

    fields = expense.model_dump()
    fields.update(
        total_amount=total,
        payer_id=payer_id,
        title=expense.title if title is None else title,
        split_policy=policy,
        participants=shares,
        items=kept_items,
        updated_at=_utcnow(),
    )
    return Expense(**fields)
