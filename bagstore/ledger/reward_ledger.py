"""
Module 03 - Reward Ledger
Continuous, accumulator-based distribution of an escrowed fee.

The fee is released at a constant `reward_rate` per second between the
start of the order and `period_finish`. At every instant the released
reward is split equally among the registered providers by advancing a
global reward-per-share accumulator; a provider's share since it last
settled is `reward_per_share - reward_per_share_paid`. Reward released
while nobody is registered goes to `undistributed`.

Accounting Rules (Hard Contracts):
1. Every function is pure: it returns a new LedgerState
2. `settle` is called before any membership change or payout
3. No reward accrues past `period_finish`
4. All arithmetic is integer; the accumulator is scaled by REWARD_PRECISION
5. Division remainders are kept in `dust` (scaled, < REWARD_PRECISION);
   whole units of dust move to `undistributed`, so nothing is lost
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


REWARD_PRECISION: int = 10**18


@dataclass(frozen=True)
class LedgerState:
    """
    Accumulators of one order's reward distribution.

    Attributes:
        reward_rate: Reward released per second (total_fee // period)
        period_finish: End of the reward period, 0 until the order starts
        last_update_time: Time the accumulator was last advanced to
        reward_per_share: Accumulated reward per provider, scaled
        undistributed: Whole units nobody is entitled to
        dust: Scaled sub-unit remainder of integer divisions
    """
    reward_rate: int
    period_finish: int = 0
    last_update_time: int = 0
    reward_per_share: int = 0
    undistributed: int = 0
    dust: int = 0

    @property
    def started(self) -> bool:
        return self.period_finish > 0


def new_ledger(total_fee: int, period: int) -> LedgerState:
    """
    Create the ledger for a freshly placed order.

    The remainder of `total_fee // period` can never be released by the
    rate, so it is placed in `undistributed` right away.

    Raises:
        ValueError: If total_fee is negative or period is not positive
    """
    if total_fee < 0:
        raise ValueError(f"Total fee must be non-negative, got {total_fee}")
    if period <= 0:
        raise ValueError(f"Storage period must be positive, got {period}")
    rate = total_fee // period
    return LedgerState(reward_rate=rate, undistributed=total_fee - rate * period)


def start(ledger: LedgerState, now: int, period: int) -> LedgerState:
    """
    Start the reward period at `now`.

    Raises:
        ValueError: If the ledger was already started
    """
    if ledger.started:
        raise ValueError("Reward period already started")
    logger.debug("Reward period starts at %d for %d seconds", now, period)
    return replace(ledger, period_finish=now + period, last_update_time=now)


def _flush_dust(undistributed: int, dust: int) -> tuple[int, int]:
    whole, rest = divmod(dust, REWARD_PRECISION)
    return undistributed + whole, rest


def settle(ledger: LedgerState, now: int, provider_count: int) -> LedgerState:
    """
    Advance the accumulator to `min(now, period_finish)`.

    The reward released since `last_update_time` is divided among
    `provider_count` shares; with no providers it becomes undistributed.

    Args:
        ledger: Current ledger
        now: Current timestamp (seconds)
        provider_count: Providers registered during the elapsed interval

    Returns:
        The settled ledger (unchanged before start or if no time elapsed)
    """
    if not ledger.started:
        return ledger

    effective_now = min(now, ledger.period_finish)
    if effective_now <= ledger.last_update_time:
        return ledger

    reward = ledger.reward_rate * (effective_now - ledger.last_update_time)

    if provider_count <= 0:
        return replace(
            ledger,
            last_update_time=effective_now,
            undistributed=ledger.undistributed + reward,
        )

    scaled = reward * REWARD_PRECISION
    increment, remainder = divmod(scaled, provider_count)
    undistributed, dust = _flush_dust(ledger.undistributed, ledger.dust + remainder)

    return replace(
        ledger,
        last_update_time=effective_now,
        reward_per_share=ledger.reward_per_share + increment,
        undistributed=undistributed,
        dust=dust,
    )


def owed(ledger: LedgerState, paid: int) -> int:
    """Scaled reward accrued to one share since the accumulator read `paid`."""
    return ledger.reward_per_share - paid


def credit(ledger: LedgerState, paid: int) -> tuple[LedgerState, int]:
    """
    Convert one share's owed reward into whole units for the provider.

    Returns:
        (ledger with the sub-unit remainder moved to dust, whole units)
    """
    amount, remainder = divmod(owed(ledger, paid), REWARD_PRECISION)
    undistributed, dust = _flush_dust(ledger.undistributed, ledger.dust + remainder)
    return replace(ledger, undistributed=undistributed, dust=dust), amount


def forfeit(ledger: LedgerState, paid: int) -> LedgerState:
    """Route one share's owed reward to undistributed (nobody earns it)."""
    undistributed, dust = _flush_dust(ledger.undistributed, ledger.dust + owed(ledger, paid))
    return replace(ledger, undistributed=undistributed, dust=dust)


def release(ledger: LedgerState) -> tuple[LedgerState, int]:
    """Take the whole undistributed balance out of the ledger."""
    return replace(ledger, undistributed=0), ledger.undistributed


def unreleased(ledger: LedgerState, period: int) -> int:
    """Reward still to be released by the rate."""
    if not ledger.started:
        return ledger.reward_rate * period
    return ledger.reward_rate * (ledger.period_finish - ledger.last_update_time)


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
