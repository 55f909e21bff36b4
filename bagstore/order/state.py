"""
Mutable state of one storage order.

An Order never mutates its committed OrderState in place: each operation
works on `copy()` and swaps the copy in once payouts succeed.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from bagstore.ledger.reward_ledger import LedgerState, new_ledger, unreleased
from bagstore.schemas.order import OrderConfig, ProviderState


@dataclass
class OrderState:
    """
    Attributes:
        total_fee: Fee escrowed when the order was placed
        ledger: Reward distribution accumulators
        providers: Registered providers by id
        balances: Claimable earnings of providers that left
        paid_out: Total moved out of the order so far
    """
    total_fee: int
    ledger: LedgerState
    providers: dict[str, ProviderState] = field(default_factory=dict)
    balances: dict[str, int] = field(default_factory=dict)
    paid_out: int = 0

    @classmethod
    def fresh(cls, config: OrderConfig, total_fee: int) -> "OrderState":
        return cls(total_fee=total_fee, ledger=new_ledger(total_fee, config.storage_period))

    @property
    def started(self) -> bool:
        return self.ledger.started

    @property
    def balance(self) -> int:
        """Fee still held by the order."""
        return self.total_fee - self.paid_out

    def unreleased(self, config: OrderConfig) -> int:
        return unreleased(self.ledger, config.storage_period)

    def copy(self) -> "OrderState":
        return OrderState(
            total_fee=self.total_fee,
            ledger=self.ledger,
            providers={pid: p.model_copy() for pid, p in self.providers.items()},
            balances=dict(self.balances),
            paid_out=self.paid_out,
        )
