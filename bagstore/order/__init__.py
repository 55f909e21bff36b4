"""
Module 04 - Storage Orders

This module provides:
- Order: one storage order, its providers and their rewards
- OrderState: the mutable state an Order commits atomically
- ProviderRegistry / ProofScheduler: membership and proof rules
- encode_order / decode_order / state_digest: binary order records
- derive_order_id: content-derived order identity
- OrderBook: order placement and admin settings

Usage:
    from bagstore.order import OrderBook
    from bagstore.config import MarketConfig

    book = OrderBook(MarketConfig(), admin="admin", treasury="treasury")
    order = book.place_order(...)
    order.register("provider-a", now)
"""
from .state import OrderState
from .registry import ProviderRegistry
from .scheduler import ChunkValue, ProofScheduler, resolve_chunk_value
from .codec import RECORD_MAGIC, decode_order, encode_order, state_digest
from .identity import derive_order_id
from .order import Order
from .book import OrderBook

__all__ = [
    "OrderState",
    "ProviderRegistry",
    "ChunkValue",
    "ProofScheduler",
    "resolve_chunk_value",
    "RECORD_MAGIC",
    "encode_order",
    "decode_order",
    "state_digest",
    "derive_order_id",
    "Order",
    "OrderBook",
]
