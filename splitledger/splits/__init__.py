"""Split calculation package."""

from splitledger.splits.calculator import (
    build_expense,
    custom_split,
    equal_split,
    itemized_split,
    mark_payer_paid,
    percentage_split,
    split,
)

__all__ = [
    "build_expense",
    "custom_split",
    "equal_split",
    "itemized_split",
    "mark_payer_paid",
    "percentage_split",
    "split",
]
