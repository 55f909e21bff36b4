"""
Module 04 - Storage Order
One storage order: its providers, their proof schedules and the
continuous distribution of the escrowed fee among them.

Operations:
- register(provider_id, now)
- submit_proof(provider_id, chunk_value, proof_path, now)
- unregister(provider_id, now)
- claim(provider_id, now)
- recycle(caller, now)

Every operation:
1. validates against the committed state (errors leave it untouched)
2. builds the new state on a copy, settling the reward ledger first
3. hands the resulting transfers to the payout sink in one call
4. commits the copy only if the sink accepted the transfers
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from bagstore.ledger.reward_ledger import credit, forfeit, release, settle, start
from bagstore.receipts.models import Transfer, TransferKind
from bagstore.receipts.recorder import PayoutSink, TransferRecorder
from bagstore.schemas.errors import (
    OrderUnexpiredException,
    PayoutFailedException,
    UnauthorizedException,
)
from bagstore.schemas.order import (
    FEE_RATE_DENOMINATOR,
    OrderConfig,
    OrderInfo,
    ProviderState,
)

from .codec import decode_order, encode_order, state_digest
from .identity import derive_order_id
from .registry import ProviderRegistry
from .scheduler import ChunkValue, ProofScheduler
from .state import OrderState

logger = logging.getLogger(__name__)


class Order:
    """
    A storage order and its provider pool.

    Usage:
        order = Order(config, total_fee=86_400_000_000)
        order.register("provider-a", now=t0)
        order.submit_proof("provider-a", chunk_bytes, proof.siblings, now=t0 + 3600)
        order.claim("provider-a", now=t0 + 3600)
    """

    def __init__(
        self,
        config: OrderConfig,
        total_fee: int,
        *,
        is_whitelisted: Optional[Callable[[str], bool]] = None,
        payouts: Optional[PayoutSink] = None,
        state: Optional[OrderState] = None,
    ) -> None:
        """
        Args:
            config: Immutable order configuration
            total_fee: Fee escrowed for the whole storage period
            is_whitelisted: Whitelist lookup; defaults to config.whitelist
            payouts: Sink executing transfers; defaults to a TransferRecorder
            state: Existing state to resume from (e.g. a decoded record)
        """
        if state is not None and state.total_fee != total_fee:
            raise ValueError(
                f"State total_fee {state.total_fee} does not match {total_fee}"
            )
        self.config = config
        self.order_id = derive_order_id(config)
        self.payouts: PayoutSink = payouts if payouts is not None else TransferRecorder()
        self._is_whitelisted = is_whitelisted or config.is_whitelisted
        self._scheduler = ProofScheduler(config, self._is_whitelisted)
        self._state = state.copy() if state is not None else OrderState.fresh(config, total_fee)

    @classmethod
    def from_record(
        cls,
        data: bytes,
        *,
        is_whitelisted: Optional[Callable[[str], bool]] = None,
        payouts: Optional[PayoutSink] = None,
    ) -> "Order":
        """Resume an order from a record produced by `to_record`."""
        config, state = decode_order(data)
        return cls(
            config,
            state.total_fee,
            is_whitelisted=is_whitelisted,
            payouts=payouts,
            state=state,
        )

    def to_record(self) -> bytes:
        return encode_order(self.config, self._state)

    def state_digest(self) -> str:
        return state_digest(self.config, self._state)

    @property
    def state(self) -> OrderState:
        """Copy of the committed state."""
        return self._state.copy()

    # =========================================================================
    # Operations
    # =========================================================================

    def register(self, provider_id: str, now: int) -> None:
        """
        Add a provider. The first registration ever starts the order.

        Raises:
            AlreadyRegisteredException: If the provider is registered
            MaxProvidersExceededException: If the provider set is full
        """
        state = self._state.copy()
        registry = self._registry(state)
        registry.ensure_can_register(provider_id)

        ledger = settle(state.ledger, now, len(registry))
        if not ledger.started:
            ledger = start(ledger, now, self.config.storage_period)
            logger.info(
                "Order %s started at %d, finishes at %d",
                self.order_id[:18], now, ledger.period_finish,
            )

        registry.add(
            provider_id,
            ProviderState(
                joined_at=now,
                last_proof_at=now,
                reward_per_share_paid=ledger.reward_per_share,
            ),
        )
        state.ledger = ledger
        self._commit(state, [])
        logger.info(
            "Provider %s registered on order %s (%d/%d)",
            provider_id, self.order_id[:18], len(registry), self.config.max_providers,
        )

    def submit_proof(
        self,
        provider_id: str,
        chunk_value: ChunkValue,
        proof_path: Sequence[int],
        now: int,
    ) -> bool:
        """
        Submit a storage proof for the provider's next expected chunk.

        Args:
            provider_id: Submitting provider
            chunk_value: Raw chunk bytes or its precomputed chunk hash
            proof_path: Sibling hashes, leaf to root
            now: Current timestamp

        Returns:
            True if the interval since the last proof was credited, False
            if it arrived late and was forfeited

        Raises:
            UnregisteredProviderException: If the provider is not registered
            InvalidProofException: If the proof does not verify
        """
        state = self._state.copy()
        registry = self._registry(state)
        provider = registry.get(provider_id)
        self._scheduler.check(provider_id, provider, chunk_value, proof_path)

        ledger = settle(state.ledger, now, len(registry))
        on_time = self._scheduler.counts_interval(provider_id, provider, now)
        if on_time:
            ledger, amount = credit(ledger, provider.reward_per_share_paid)
            provider.earned += amount
            logger.debug(
                "Proof from %s for chunk %d accepted, credited %d",
                provider_id, provider.next_chunk_index, amount,
            )
        else:
            ledger = forfeit(ledger, provider.reward_per_share_paid)
            logger.warning(
                "Late proof from %s: due at %d, received at %d; interval forfeited",
                provider_id, self._scheduler.deadline(provider), now,
            )

        provider.reward_per_share_paid = ledger.reward_per_share
        self._scheduler.advance(provider, now, on_time)
        state.ledger = ledger
        self._commit(state, [])
        return on_time

    def unregister(self, provider_id: str, now: int) -> None:
        """
        Remove a provider. Time since its last proof is forfeited; its
        earnings stay claimable.

        Raises:
            UnregisteredProviderException: If the provider is not registered
        """
        state = self._state.copy()
        registry = self._registry(state)
        provider = registry.get(provider_id)

        ledger = settle(state.ledger, now, len(registry))
        ledger = forfeit(ledger, provider.reward_per_share_paid)
        registry.remove(provider_id)
        if provider.earned:
            state.balances[provider_id] = state.balances.get(provider_id, 0) + provider.earned

        state.ledger = ledger
        self._commit(state, [])
        logger.info(
            "Provider %s unregistered from order %s, %d left claimable",
            provider_id, self.order_id[:18], state.balances.get(provider_id, 0),
        )

    def claim(self, provider_id: str, now: int) -> int:
        """
        Pay out a provider's earned reward, less the treasury fee.

        Claiming with nothing earned is a no-op.

        Returns:
            Amount transferred to the provider
        """
        state = self._state.copy()
        registry = self._registry(state)
        provider = registry.find(provider_id)

        if provider is not None:
            state.ledger = settle(state.ledger, now, len(registry))
        earned = provider.earned if provider is not None else 0
        amount = earned + state.balances.get(provider_id, 0)
        if amount == 0:
            return 0

        fee = amount * self.config.treasury_fee_rate // FEE_RATE_DENOMINATOR
        net = amount - fee
        if provider is not None:
            provider.earned = 0
        state.balances.pop(provider_id, None)
        state.paid_out += amount

        transfers = []
        if net:
            transfers.append(self._transfer(provider_id, net, "reward", now))
        if fee:
            transfers.append(self._transfer(self.config.treasury, fee, "treasury_fee", now))
        self._commit(state, transfers)
        logger.info("Provider %s claimed %d (treasury fee %d)", provider_id, net, fee)
        return net

    def recycle(self, caller: str, now: int) -> int:
        """
        Send undistributed reward to the treasury once the period is over.

        Returns:
            Amount transferred to the treasury (0 if nothing to recycle)

        Raises:
            UnauthorizedException: If caller is neither owner nor treasury
            OrderUnexpiredException: If the order has not started or the
                storage period has not finished
        """
        if caller not in (self.config.owner, self.config.treasury):
            raise UnauthorizedException(
                f"{caller} may not recycle order {self.order_id}", caller=caller
            )
        period_finish = self._state.ledger.period_finish
        if not self._state.started or now <= period_finish:
            raise OrderUnexpiredException(
                f"Order {self.order_id} has not expired at {now}",
                period_finish=period_finish,
            )

        state = self._state.copy()
        ledger = settle(state.ledger, now, len(state.providers))
        ledger, amount = release(ledger)
        if amount == 0:
            return 0

        state.ledger = ledger
        state.paid_out += amount
        self._commit(state, [self._transfer(self.config.treasury, amount, "recycle", now)])
        logger.info("Recycled %d from order %s to treasury", amount, self.order_id[:18])
        return amount

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def started(self) -> bool:
        return self._state.started

    @property
    def period_finish(self) -> int:
        return self._state.ledger.period_finish

    @property
    def total_providers(self) -> int:
        return len(self._state.providers)

    @property
    def undistributed_rewards(self) -> int:
        return self._state.ledger.undistributed

    @property
    def balance(self) -> int:
        """Fee still held by the order."""
        return self._state.balance

    def earned(self, provider_id: str) -> int:
        """Claimable amount: earned while registered plus balance after leaving."""
        provider = self._state.providers.get(provider_id)
        earned = provider.earned if provider is not None else 0
        return earned + self._state.balances.get(provider_id, 0)

    def last_proof_valid(self, provider_id: str) -> bool:
        provider = self._state.providers.get(provider_id)
        return provider is not None and provider.last_proof_valid

    def next_proof_index(self, provider_id: str) -> int:
        """Chunk index the provider must prove next, or -1 if not registered."""
        provider = self._state.providers.get(provider_id)
        if provider is None:
            return -1
        return self._scheduler.expected_chunk(provider)

    def next_proof_due_at(self, provider_id: str) -> Optional[int]:
        provider = self._state.providers.get(provider_id)
        if provider is None:
            return None
        return self._scheduler.deadline(provider)

    def is_registered(self, provider_id: str) -> bool:
        return provider_id in self._state.providers

    def is_whitelisted(self, provider_id: str) -> bool:
        return self._is_whitelisted(provider_id)

    def order_info(self) -> OrderInfo:
        return OrderInfo(
            order_id=self.order_id,
            config=self.config,
            total_fee=self._state.total_fee,
            reward_rate=self._state.ledger.reward_rate,
            started=self.started,
            period_finish=self.period_finish,
            total_providers=self.total_providers,
            undistributed_rewards=self.undistributed_rewards,
            balance=self.balance,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _registry(self, state: OrderState) -> ProviderRegistry:
        return ProviderRegistry(
            state.providers, self.config.max_providers, self._is_whitelisted
        )

    def _transfer(self, recipient: str, amount: int, kind: TransferKind, at: int) -> Transfer:
        return Transfer(
            order_id=self.order_id, recipient=recipient, amount=amount, kind=kind, at=at
        )

    def _commit(self, state: OrderState, transfers: list[Transfer]) -> None:
        if transfers:
            try:
                self.payouts.settle(transfers)
            except Exception as e:
                logger.error("Payout sink rejected %d transfers: %s", len(transfers), e)
                raise PayoutFailedException(
                    f"Payout failed: {e}",
                    details={"transfers": [t.receipt_id for t in transfers]},
                ) from e
        self._state = state

    def __repr__(self) -> str:
        return (
            f"Order(id={self.order_id[:18]}..., providers={self.total_providers}, "
            f"started={self.started}, balance={self.balance})"
        )
