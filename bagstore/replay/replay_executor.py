"""
Module 08 - Replay Executor

Re-runs a timestamped operation log against a fresh order and compares the
resulting state digest with an expected one. Because every operation takes
an explicit `now` and the order never reads a clock, the same log always
produces the same record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bagstore.order.order import Order
from bagstore.receipts.recorder import TransferRecorder
from bagstore.schemas.errors import StorageError, StorageException
from bagstore.schemas.order import OrderConfig

logger = logging.getLogger(__name__)


OrderOp = Literal["register", "submit_proof", "unregister", "claim", "recycle"]


def _parse_uint(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16)
    return value


class OrderEvent(BaseModel):
    """
    One operation in an order's log.

    For submit_proof, exactly one of `chunk` (raw bytes) or `chunk_hash`
    must be given. Integers may be written as 0x-prefixed hex strings.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    op: OrderOp
    actor: str = Field(..., min_length=1)
    at: int = Field(..., ge=0)
    chunk: Optional[bytes] = None
    chunk_hash: Optional[int] = None
    proof_path: list[int] = Field(default_factory=list)

    @field_validator("chunk_hash", mode="before")
    @classmethod
    def _parse_chunk_hash(cls, value: Any) -> Any:
        return _parse_uint(value)

    @field_validator("proof_path", mode="before")
    @classmethod
    def _parse_proof_path(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_parse_uint(v) for v in value]
        return value

    @model_validator(mode="after")
    def _check_proof_fields(self) -> "OrderEvent":
        if self.op == "submit_proof":
            if (self.chunk is None) == (self.chunk_hash is None):
                raise ValueError("submit_proof needs exactly one of chunk or chunk_hash")
        elif self.chunk is not None or self.chunk_hash is not None or self.proof_path:
            raise ValueError(f"{self.op} does not take proof fields")
        return self


@dataclass
class ReplayOutcome:
    """Result of one replayed event: `ok` or the error code it failed with."""
    index: int
    op: str
    actor: str
    at: int
    ok: bool
    code: str = "ok"
    value: Any = None
    error: Optional[StorageError] = None


@dataclass
class ReplayResult:
    """Result of replaying an operation log."""
    order: Order
    outcomes: list[ReplayOutcome] = field(default_factory=list)
    state_digest: str = ""

    @property
    def failed(self) -> list[ReplayOutcome]:
        return [o for o in self.outcomes if not o.ok]


@dataclass
class ReplayVerification:
    """Comparison of a replayed digest against the expected one."""
    ok: bool
    expected_digest: str
    actual_digest: str
    result: ReplayResult


class ReplayExecutor:
    """
    Executor for replaying order operation logs.

    Failed operations are recorded in the outcomes, not raised: a log may
    legitimately contain rejected operations and replay must reproduce the
    rejection.
    """

    def __init__(self, is_whitelisted: Optional[Callable[[str], bool]] = None) -> None:
        """
        Args:
            is_whitelisted: Whitelist lookup passed to the replayed order;
                defaults to the config's whitelist snapshot
        """
        self._is_whitelisted = is_whitelisted

    def replay(
        self,
        config: OrderConfig,
        total_fee: int,
        events: Sequence[OrderEvent],
    ) -> ReplayResult:
        order = Order(
            config,
            total_fee,
            is_whitelisted=self._is_whitelisted,
            payouts=TransferRecorder(),
        )
        result = ReplayResult(order=order)

        for index, event in enumerate(events):
            try:
                value = self._apply(order, event)
            except StorageException as e:
                logger.debug("Replayed event %d (%s) failed with %s", index, event.op, e.code)
                result.outcomes.append(ReplayOutcome(
                    index=index, op=event.op, actor=event.actor, at=event.at,
                    ok=False, code=e.code, error=e.to_error_model(),
                ))
                continue
            result.outcomes.append(ReplayOutcome(
                index=index, op=event.op, actor=event.actor, at=event.at,
                ok=True, value=value,
            ))

        result.state_digest = order.state_digest()
        logger.info(
            "Replayed %d events (%d failed), digest %s",
            len(events), len(result.failed), result.state_digest[:16],
        )
        return result

    @staticmethod
    def _apply(order: Order, event: OrderEvent) -> Any:
        if event.op == "register":
            return order.register(event.actor, event.at)
        if event.op == "submit_proof":
            chunk_value = event.chunk if event.chunk is not None else event.chunk_hash
            return order.submit_proof(event.actor, chunk_value, event.proof_path, event.at)
        if event.op == "unregister":
            return order.unregister(event.actor, event.at)
        if event.op == "claim":
            return order.claim(event.actor, event.at)
        return order.recycle(event.actor, event.at)


def verify_replay(
    config: OrderConfig,
    total_fee: int,
    events: Sequence[OrderEvent],
    expected_digest: str,
    *,
    is_whitelisted: Optional[Callable[[str], bool]] = None,
) -> ReplayVerification:
    """Replay `events` and check the final state digest against `expected_digest`."""
    result = ReplayExecutor(is_whitelisted).replay(config, total_fee, events)
    ok = result.state_digest == expected_digest
    if not ok:
        logger.warning(
            "Replay digest mismatch: expected %s, got %s",
            expected_digest[:16], result.state_digest[:16],
        )
    return ReplayVerification(
        ok=ok,
        expected_digest=expected_digest,
        actual_digest=result.state_digest,
        result=result,
    )
