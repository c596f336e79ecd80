"""Ledger computation package: balances, settlements, edits and summaries."""

from splitledger.ledger.balances import compute_balances
from splitledger.ledger.expenses import edit_expense, mark_share_paid, replace_participants
from splitledger.ledger.settlement import optimize_settlements
from splitledger.ledger.summary import summarize_group, summarize_member

__all__ = [
    "compute_balances",
    "edit_expense",
    "mark_share_paid",
    "optimize_settlements",
    "replace_participants",
    "summarize_group",
    "summarize_member",
]
