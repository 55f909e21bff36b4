"""
Common test fixtures shared by all modules.

Provides factory functions for core bagstore data structures:
- file contents and their chunk Merkle trees
- OrderConfig
- Order (with an in-memory TransferRecorder)
- proof submissions for a provider's next expected chunk
"""

from typing import Optional

from bagstore.config.runtime import ONE_DAY, ONE_HOUR
from bagstore.ledger.reward_ledger import REWARD_PRECISION
from bagstore.merkle.merkle_proofs import FileMerkleTree
from bagstore.order.order import Order
from bagstore.receipts.recorder import TransferRecorder
from bagstore.schemas.order import OrderConfig


T0 = 1_700_000_000

# 86.4 units of 10**9 base units over 360 days: 2777 base units per second
WALKTHROUGH_FEE = 86_400_000_000
WALKTHROUGH_PERIOD = 360 * ONE_DAY


# =============================================================================
# File / Merkle Factories
# =============================================================================

def make_file_bytes(size: int = 10_000, seed: int = 7) -> bytes:
    """Deterministic pseudo-random file contents."""
    state = seed
    out = bytearray()
    for _ in range(size):
        state = (state * 1103515245 + 12345) & 0x7FFFFFFF
        out.append(state >> 16 & 0xFF)
    return bytes(out)


def make_file_tree(size: int = 10_000, seed: int = 7) -> FileMerkleTree:
    return FileMerkleTree.from_bytes(make_file_bytes(size, seed))


# =============================================================================
# OrderConfig Factory
# =============================================================================

def make_order_config(
    tree: Optional[FileMerkleTree] = None,
    owner: str = "owner",
    treasury: str = "treasury",
    torrent_hash: int = 0xB16B00B5,
    storage_period: int = WALKTHROUGH_PERIOD,
    max_proof_span: int = ONE_HOUR,
    treasury_fee_rate: int = 0,
    max_providers: int = 30,
    whitelist: frozenset[str] = frozenset(),
) -> OrderConfig:
    """
    Create an OrderConfig for testing.

    Args:
        tree: File tree the order stores (default: a 10 000 byte file)
    """
    tree = tree or make_file_tree()
    return OrderConfig(
        torrent_hash=torrent_hash,
        owner=owner,
        merkle_root=tree.root,
        file_size=tree.file_size,
        storage_period=storage_period,
        max_proof_span=max_proof_span,
        treasury=treasury,
        treasury_fee_rate=treasury_fee_rate,
        max_providers=max_providers,
        whitelist=whitelist,
    )


# =============================================================================
# Order Factory
# =============================================================================

def make_order(
    tree: Optional[FileMerkleTree] = None,
    total_fee: int = WALKTHROUGH_FEE,
    payouts=None,
    **config_overrides,
) -> tuple[Order, FileMerkleTree, TransferRecorder]:
    """
    Create an Order with a recording payout sink.

    Returns:
        (order, tree, recorder)
    """
    tree = tree or make_file_tree()
    config = make_order_config(tree=tree, **config_overrides)
    recorder = payouts if payouts is not None else TransferRecorder()
    return Order(config, total_fee, payouts=recorder), tree, recorder


def submit_next_proof(order: Order, tree: FileMerkleTree, provider_id: str, now: int) -> bool:
    """Submit a valid proof for the provider's next expected chunk."""
    index = order.next_proof_index(provider_id)
    proof = tree.proof(index)
    return order.submit_proof(provider_id, tree.chunk(index), proof.siblings, now)


# =============================================================================
# Accounting Helpers
# =============================================================================

def conservation_gap(order: Order) -> int:
    """
    Scaled difference between the escrowed fee and everything it is split
    into. Zero for a correctly accounted order.
    """
    state = order.state
    ledger = state.ledger
    providers = state.providers.values()
    pending = sum(ledger.reward_per_share - p.reward_per_share_paid for p in providers)
    accounted = (
        state.paid_out
        + sum(p.earned for p in providers)
        + sum(state.balances.values())
        + ledger.undistributed
        + state.unreleased(order.config)
    )
    return REWARD_PRECISION * state.total_fee - (
        REWARD_PRECISION * accounted + ledger.dust + pending
    )


def assert_close(expected: int, actual: int) -> None:
    """Equality within 8/10000 of the expected value."""
    assert abs(expected - actual) <= abs(expected) * 8 // 10000, (
        f"expected {expected}, got {actual}"
    )
