"""
SplitLedger - Source Package

Ledger and settlement engine for splitting shared expenses among a group
and working out who owes whom.

DESIGN PRINCIPLES:
1. Expenses are the only source of truth; balances are always derived
2. Money is exact (fixed-point, two decimal places)
3. Invalid splits fail loudly before they reach the ledger
4. The core is pure; storage and notifications live outside it
5. Settlements are suggestions, never payments
"""

__version__ = "1.0.0"
__author__ = "SplitLedger Team"
