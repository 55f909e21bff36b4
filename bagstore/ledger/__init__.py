"""
Module 03 - Reward Ledger
Accumulator-based reward accrual shared among an order's providers.
"""
from .reward_ledger import (
    REWARD_PRECISION,
    LedgerState,
    new_ledger,
    start,
    settle,
    owed,
    credit,
    forfeit,
    release,
    unreleased,
)

__all__ = [
    "REWARD_PRECISION",
    "LedgerState",
    "new_ledger",
    "start",
    "settle",
    "owed",
    "credit",
    "forfeit",
    "release",
    "unreleased",
]
