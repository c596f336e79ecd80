"""
Settlement Optimizer

Reduces member balances to a short list of debtor -> creditor transfers.

ALGORITHM (greedy two-pointer):
1. Copy balances and stable-sort them by net balance, largest creditor
   first. Ties keep the original member order.
2. Walk inward from both ends: the left pointer is the largest remaining
   creditor, the right pointer the largest remaining debtor.
3. Each step transfers min(credit, debt) and retires whichever side
   reached zero.

GUARANTEES:
- Total transferred equals the sum of positive balances, except for
  dust (see below)
- At most n - 1 transfers for n members
- Deterministic for a given input order

DUST: a transfer must exceed the threshold. When the smaller side of a
pair holds exactly one threshold unit, that unit is dropped and no
transfer is made. Tiny groups can therefore end up with no settlements
at all: 0.03 split three ways leaves the payer at +0.02 and two
debtors at -0.01 each, and nothing is suggested.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

import structlog

from splitledger.config import get_settings
from splitledger.models.ledger import CENT, ZERO, Balance, Settlement


logger = structlog.get_logger(__name__)


def optimize_settlements(
    balances: Iterable[Balance],
    threshold: Optional[Decimal] = None,
) -> list[Settlement]:
    """
    Suggest the transfers that bring every balance to zero.

    Args:
        balances: Member balances (not modified)
        threshold: Balances closer to zero than this count as settled
            (defaults to settings)

    Returns:
        Ordered settlements; empty if everyone is already settled
    """
    if threshold is None:
        threshold = get_settings().ledger.settlement_threshold

    # sorted() is stable with reverse=True, so ties keep member order
    working = [
        {"member_id": b.member_id, "group_id": b.group_id, "net": b.net_balance}
        for b in sorted(balances, key=lambda b: b.net_balance, reverse=True)
    ]

    settlements: list[Settlement] = []
    left = 0
    right = len(working) - 1

    while left < right:
        creditor = working[left]
        debtor = working[right]

        if abs(creditor["net"]) < threshold:
            left += 1
            continue
        if abs(debtor["net"]) < threshold:
            right -= 1
            continue

        if creditor["net"] <= 0:
            left += 1
            continue
        if debtor["net"] >= 0:
            right -= 1
            continue

        amount = min(creditor["net"], -debtor["net"]).quantize(CENT, rounding=ROUND_HALF_UP)

        if amount > threshold:
            settlements.append(Settlement(
                from_id=debtor["member_id"],
                to_id=creditor["member_id"],
                amount=amount,
                group_id=creditor["group_id"],
            ))
            creditor["net"] -= amount
            debtor["net"] += amount

            if abs(creditor["net"]) < threshold:
                left += 1
            if abs(debtor["net"]) < threshold:
                right -= 1
        else:
            # Exactly one threshold unit left on the smaller side: drop it as dust
            if creditor["net"] <= -debtor["net"]:
                left += 1
            if -debtor["net"] <= creditor["net"]:
                right -= 1

    logger.debug(
        "settlements_optimized",
        members=len(working),
        settlements=len(settlements),
        volume=str(sum((s.amount for s in settlements), ZERO)),
    )
    return settlements
