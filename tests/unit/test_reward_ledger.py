"""
Module 03 - Reward Ledger Unit Tests
Tests for bagstore/ledger/reward_ledger.py
"""
import pytest

from bagstore.ledger.reward_ledger import (
    REWARD_PRECISION,
    credit,
    forfeit,
    new_ledger,
    owed,
    release,
    settle,
    start,
    unreleased,
)


class TestNewLedger:
    """Tests for ledger creation."""

    def test_rate_and_remainder(self):
        """The fee remainder that the rate cannot release is undistributed."""
        ledger = new_ledger(1000, 300)
        assert ledger.reward_rate == 3
        assert ledger.undistributed == 100
        assert not ledger.started

    def test_invalid_inputs(self):
        with pytest.raises(ValueError):
            new_ledger(-1, 10)
        with pytest.raises(ValueError):
            new_ledger(100, 0)


class TestStart:
    """Tests for start()."""

    def test_start_sets_period(self):
        ledger = start(new_ledger(1000, 100), now=50, period=100)
        assert ledger.started
        assert ledger.period_finish == 150
        assert ledger.last_update_time == 50

    def test_double_start_rejected(self):
        ledger = start(new_ledger(1000, 100), now=50, period=100)
        with pytest.raises(ValueError, match="already"):
            start(ledger, now=60, period=100)


class TestSettle:
    """Tests for settle()."""

    def test_noop_before_start(self):
        ledger = new_ledger(1000, 100)
        assert settle(ledger, 500, 3) == ledger

    def test_no_providers_goes_undistributed(self):
        ledger = start(new_ledger(1000, 100), now=0, period=100)
        settled = settle(ledger, 7, 0)
        assert settled.undistributed == 70
        assert settled.reward_per_share == 0
        assert settled.last_update_time == 7

    def test_split_among_providers_keeps_dust(self):
        """10 units over 3 shares: each share 10/3, remainder kept as dust."""
        ledger = start(new_ledger(1000, 100), now=0, period=100)
        settled = settle(ledger, 1, 3)
        assert settled.reward_per_share == 10 * REWARD_PRECISION // 3
        assert settled.dust == 1
        assert settled.undistributed == 0

    def test_clamped_to_period_finish(self):
        """No reward accrues past period_finish."""
        ledger = start(new_ledger(1000, 100), now=0, period=100)
        settled = settle(ledger, 10_000, 1)
        assert settled.last_update_time == 100
        assert settled.reward_per_share == 1000 * REWARD_PRECISION
        assert unreleased(settled, 100) == 0

    def test_time_never_moves_back(self):
        ledger = settle(start(new_ledger(1000, 100), now=0, period=100), 20, 1)
        assert settle(ledger, 10, 1) == ledger


class TestShares:
    """Tests for credit / forfeit / release."""

    def test_credit_whole_units(self):
        ledger = settle(start(new_ledger(1000, 100), now=0, period=100), 1, 3)
        credited, amount = credit(ledger, 0)
        assert amount == 3
        assert credited.dust == 1 + (owed(ledger, 0) - 3 * REWARD_PRECISION)
        assert credited.dust < REWARD_PRECISION

    def test_dust_flushes_to_undistributed(self):
        """Whole units accumulating in dust move to undistributed."""
        ledger = settle(start(new_ledger(1000, 100), now=0, period=100), 1, 3)
        for _ in range(3):
            ledger, _ = credit(ledger, 0)
        assert ledger.undistributed == 1
        assert ledger.dust < REWARD_PRECISION

    def test_forfeit_routes_to_undistributed(self):
        ledger = settle(start(new_ledger(1000, 100), now=0, period=100), 5, 1)
        assert forfeit(ledger, 0).undistributed == 50

    def test_release_empties_undistributed(self):
        ledger = settle(start(new_ledger(1000, 100), now=0, period=100), 5, 0)
        released, amount = release(ledger)
        assert amount == 50
        assert released.undistributed == 0

    def test_unreleased_before_and_after(self):
        ledger = new_ledger(1000, 100)
        assert unreleased(ledger, 100) == 1000
        ledger = settle(start(ledger, now=0, period=100), 30, 2)
        assert unreleased(ledger, 100) == 700
