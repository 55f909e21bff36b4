"""
Order Book

Places storage orders against the current market parameters and holds the
admin-controlled settings (parameters, treasury, admin, whitelist). Every
setting is snapshotted into the OrderConfig at placement time, so admin
changes only affect orders placed afterwards.
"""
from __future__ import annotations

import logging
from typing import Optional

from bagstore.config.runtime import MarketConfig
from bagstore.receipts.recorder import PayoutSink, TransferRecorder
from bagstore.schemas.errors import (
    DuplicatedTorrentHashException,
    FileTooLargeException,
    FileTooSmallException,
    NotEnoughStorageFeeException,
    StoragePeriodTooShortException,
    UnauthorizedException,
)
from bagstore.schemas.order import OrderConfig

from .order import Order

logger = logging.getLogger(__name__)


class OrderBook:
    """
    Registry of storage orders.

    Usage:
        book = OrderBook(MarketConfig(), admin="admin", treasury="treasury")
        order = book.place_order(
            owner="alice",
            torrent_hash=0xABC...,
            file_size=len(data),
            merkle_root=tree.root,
            total_fee=86_400_000_000,
            storage_period=360 * ONE_DAY,
            now=t0,
        )
    """

    def __init__(
        self,
        market: MarketConfig,
        admin: str,
        treasury: str,
        *,
        payouts: Optional[PayoutSink] = None,
    ) -> None:
        self.market = market
        self.admin = admin
        self.treasury = treasury
        self.payouts: PayoutSink = payouts if payouts is not None else TransferRecorder()
        self._whitelist: set[str] = set()
        self._orders: dict[str, Order] = {}
        self._by_torrent: dict[int, list[str]] = {}

    # =========================================================================
    # Placement
    # =========================================================================

    def place_order(
        self,
        owner: str,
        torrent_hash: int,
        file_size: int,
        merkle_root: int,
        total_fee: int,
        storage_period: int,
        now: int,
    ) -> Order:
        """
        Validate and place a new order.

        Raises:
            NotEnoughStorageFeeException: total_fee below the market minimum
            FileTooSmallException / FileTooLargeException: file_size outside
                the market bounds
            StoragePeriodTooShortException: storage_period below the minimum
            DuplicatedTorrentHashException: an open order already stores
                this torrent
        """
        market = self.market
        if total_fee < market.min_storage_fee:
            raise NotEnoughStorageFeeException(
                f"Storage fee {total_fee} is below the minimum {market.min_storage_fee}",
                details={"total_fee": total_fee, "min_storage_fee": market.min_storage_fee},
            )
        if file_size < market.min_file_size:
            raise FileTooSmallException(
                f"File size {file_size} is below the minimum {market.min_file_size}",
                details={"file_size": file_size},
            )
        if file_size > market.max_file_size:
            raise FileTooLargeException(
                f"File size {file_size} exceeds the maximum {market.max_file_size}",
                details={"file_size": file_size},
            )
        if storage_period < market.min_storage_period:
            raise StoragePeriodTooShortException(
                f"Storage period {storage_period} is below the minimum {market.min_storage_period}",
                details={"storage_period": storage_period},
            )
        existing = self.find_by_torrent(torrent_hash, now=now)
        if existing is not None:
            raise DuplicatedTorrentHashException(
                f"Torrent {torrent_hash:#066x} is already stored by order {existing.order_id}",
                details={"order_id": existing.order_id},
            )

        config = OrderConfig(
            torrent_hash=torrent_hash,
            owner=owner,
            merkle_root=merkle_root,
            file_size=file_size,
            storage_period=storage_period,
            max_proof_span=market.max_proof_span,
            treasury=self.treasury,
            treasury_fee_rate=market.treasury_fee_rate,
            max_providers=market.max_providers_per_order,
            whitelist=frozenset(self._whitelist),
        )
        order = Order(config, total_fee, payouts=self.payouts)
        if order.order_id in self._orders:
            # Same torrent, owner and market snapshot as an expired order
            raise DuplicatedTorrentHashException(
                f"Order {order.order_id} already exists",
                details={"order_id": order.order_id},
            )
        self._orders[order.order_id] = order
        self._by_torrent.setdefault(torrent_hash, []).append(order.order_id)
        logger.info(
            "Placed order %s for torrent %#x by %s: fee %d over %ds",
            order.order_id[:18], torrent_hash, owner, total_fee, storage_period,
        )
        return order

    # =========================================================================
    # Admin
    # =========================================================================

    def _require_admin(self, caller: str) -> None:
        if caller != self.admin:
            raise UnauthorizedException(f"{caller} is not the order book admin", caller=caller)

    def set_param(self, caller: str, name: str | int, value: int) -> None:
        """
        Change one market parameter for future orders.

        Raises:
            UnauthorizedException: If caller is not the admin
            KeyError: If the parameter is unknown
            ValueError: If the value is invalid
        """
        self._require_admin(caller)
        self.market = self.market.with_param(name, value)
        logger.info("Market parameter %s set to %d", name, value)

    def update_treasury(self, caller: str, treasury: str) -> None:
        self._require_admin(caller)
        self.treasury = treasury
        logger.info("Treasury updated to %s", treasury)

    def update_admin(self, caller: str, admin: str) -> None:
        self._require_admin(caller)
        self.admin = admin
        logger.info("Admin updated to %s", admin)

    def add_to_whitelist(self, caller: str, provider_id: str) -> None:
        self._require_admin(caller)
        self._whitelist.add(provider_id)
        logger.info("Provider %s added to whitelist", provider_id)

    def remove_from_whitelist(self, caller: str, provider_id: str) -> None:
        self._require_admin(caller)
        self._whitelist.discard(provider_id)
        logger.info("Provider %s removed from whitelist", provider_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def find_by_torrent(self, torrent_hash: int, now: Optional[int] = None) -> Optional[Order]:
        """
        Most recent order for a torrent.

        With `now`, only an order still open at that time is returned: one
        that has not started, or whose storage period has not finished.
        """
        for order_id in reversed(self._by_torrent.get(torrent_hash, [])):
            order = self._orders[order_id]
            if now is None or not order.started or now <= order.period_finish:
                return order
        return None

    def is_whitelisted(self, provider_id: str) -> bool:
        return provider_id in self._whitelist

    @property
    def whitelist(self) -> frozenset[str]:
        return frozenset(self._whitelist)

    def __len__(self) -> int:
        return len(self._orders)
