"""
Group and Member Summaries

Read-only totals for dashboards. Like balances, these are always
recomputed from the current expenses and recorded settlements.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from splitledger.models.ledger import (
    CENT,
    ZERO,
    Expense,
    GroupSummary,
    MemberSummary,
    Settlement,
)


def summarize_group(
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
    group_id: Optional[str] = None,
) -> GroupSummary:
    """
    Total spend, settled and pending amounts for a group.

    settlement_rate is the settled amount as a percentage of total
    expenses (0 when there are no expenses).
    """
    expenses = [e for e in expenses if group_id is None or e.group_id == group_id]
    settlements = [s for s in settlements if group_id is None or s.group_id == group_id]

    total_expenses = sum((e.total_amount for e in expenses), ZERO)
    total_settled = sum((s.amount for s in settlements if s.is_paid), ZERO)
    total_pending = sum((s.amount for s in settlements if not s.is_paid), ZERO)

    rate = ZERO
    if total_expenses > 0:
        rate = (total_settled / total_expenses * Decimal("100")).quantize(
            CENT, rounding=ROUND_HALF_UP
        )

    return GroupSummary(
        group_id=group_id,
        total_expenses=total_expenses,
        total_settled=total_settled,
        total_pending=total_pending,
        settlement_rate=rate,
    )


def summarize_member(
    member_id: str,
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
) -> MemberSummary:
    """What a member paid, their share of everything, and open settlements."""
    expenses = list(expenses)
    settlements = list(settlements)

    total_paid = sum((e.total_amount for e in expenses if e.payer_id == member_id), ZERO)

    total_share = ZERO
    for expense in expenses:
        share = expense.share_for(member_id)
        if share is not None:
            total_share += share.amount

    owed_to_member = sum(
        (s.amount for s in settlements if s.to_id == member_id and not s.is_paid),
        ZERO,
    )
    member_owes = sum(
        (s.amount for s in settlements if s.from_id == member_id and not s.is_paid),
        ZERO,
    )

    return MemberSummary(
        member_id=member_id,
        total_paid=total_paid,
        total_share=total_share,
        net_balance=total_paid - total_share,
        amount_owed_to_member=owed_to_member,
        amount_member_owes=member_owes,
    )
