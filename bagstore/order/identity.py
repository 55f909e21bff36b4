"""
Order identity.

An order id commits to the order's full configuration, so two orders
differing in any parameter (owner, root, whitelist snapshot, ...) never
share an id.
"""
from __future__ import annotations

from bagstore.crypto.hashing import hash_canonical, to_hex
from bagstore.schemas.order import OrderConfig


def derive_order_id(config: OrderConfig) -> str:
    """Compute canonical hash of the order config. Returns 0x-prefixed hex (32 bytes)."""
    return to_hex(hash_canonical(config))
