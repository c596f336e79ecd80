"""
Balance Aggregation

Folds a group's expenses into one net balance per member.

RULES:
- The payer is credited the FULL total as lent, even if they are also
  a participant (their own share is normally marked paid)
- Each unpaid share is added to that participant's total owed
- net_balance = total_lent - total_owed

DESIGN DECISION: This is a stateless fold over the full expense set.
There is no incremental update and no cache; callers recompute after
every change, and identical inputs always give identical output.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from splitledger.config import get_settings
from splitledger.models.ledger import ZERO, Balance, Expense
from splitledger.validation.guards import UnknownMemberError


logger = structlog.get_logger(__name__)


def compute_balances(
    group_members: Iterable[str],
    group_expenses: Iterable[Expense],
    group_id: Optional[str] = None,
    strict: Optional[bool] = None,
) -> list[Balance]:
    """
    Compute one Balance per group member.

    Args:
        group_members: Ordered member IDs; output follows this order
        group_expenses: The group's current expenses
        group_id: If given, expenses of other groups are ignored and the
            ID is stamped on every Balance
        strict: Raise on members outside the group instead of skipping
            them (defaults to settings)

    Returns:
        Balances in group_members order

    Raises:
        UnknownMemberError: Only in strict mode
    """
    if strict is None:
        strict = get_settings().ledger.strict_membership

    lent: dict[str, Decimal] = {member_id: ZERO for member_id in group_members}
    owed: dict[str, Decimal] = {member_id: ZERO for member_id in lent}

    skipped = 0
    folded = 0
    for expense in group_expenses:
        if group_id is not None and expense.group_id != group_id:
            continue
        folded += 1

        if expense.payer_id in lent:
            lent[expense.payer_id] += expense.total_amount
        elif strict:
            raise UnknownMemberError(expense.payer_id, expense.id)
        else:
            skipped += 1

        for share in expense.participants:
            if share.member_id not in owed:
                if strict:
                    raise UnknownMemberError(share.member_id, expense.id)
                skipped += 1
                continue
            if not share.paid:
                owed[share.member_id] += share.amount

    if skipped:
        logger.debug("unknown_members_skipped", group_id=group_id, count=skipped)
    logger.debug("balances_folded", group_id=group_id, members=len(lent), expenses=folded)

    return [
        Balance(
            member_id=member_id,
            group_id=group_id,
            total_owed=owed[member_id],
            total_lent=lent[member_id],
            net_balance=lent[member_id] - owed[member_id],
        )
        for member_id in lent
    ]
