"""
Transfer Recorder

Payout sink interface plus the default in-memory implementation. An order
hands every operation's transfers to the sink in one call; the sink must
either accept all of them or raise, in which case the order does not
commit the operation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Protocol, Sequence, runtime_checkable

from .models import Transfer, TransferKind

logger = logging.getLogger(__name__)


@runtime_checkable
class PayoutSink(Protocol):
    """Host-side money movement. All-or-nothing per call."""

    def settle(self, transfers: Sequence[Transfer]) -> None:
        """Execute all transfers or raise without executing any."""
        ...


class TransferRecorder:
    """
    Records transfers in memory.

    Usage:
        recorder = TransferRecorder()
        order = Order(config, total_fee, payouts=recorder)
        order.claim("provider-a", now)
        recorder.total_received("provider-a")
    """

    def __init__(self) -> None:
        self._transfers: list[Transfer] = []
        self._received: dict[str, int] = defaultdict(int)

    def settle(self, transfers: Sequence[Transfer]) -> None:
        for transfer in transfers:
            self._transfers.append(transfer)
            self._received[transfer.recipient] += transfer.amount
            logger.debug(
                "Recorded %s of %d to %s (%s)",
                transfer.kind, transfer.amount, transfer.recipient, transfer.receipt_id,
            )

    @property
    def transfers(self) -> list[Transfer]:
        return list(self._transfers)

    def total_received(self, recipient: str) -> int:
        """Sum of all transfers to a recipient."""
        return self._received.get(recipient, 0)

    def total_by_kind(self, kind: TransferKind) -> int:
        return sum(t.amount for t in self._transfers if t.kind == kind)

    def total(self) -> int:
        return sum(t.amount for t in self._transfers)

    def clear(self) -> None:
        self._transfers.clear()
        self._received.clear()
