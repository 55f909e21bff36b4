"""
Test fixtures package for bagstore tests.

This package provides factory functions for creating test objects:
- common.py: file trees, order configs, orders and proof helpers

Usage:
    from fixtures.common import make_order, submit_next_proof

    def test_something():
        order, tree, recorder = make_order()
        order.register("alice", T0)
        submit_next_proof(order, tree, "alice", T0 + 3600)
"""

from .common import (
    T0,
    WALKTHROUGH_FEE,
    WALKTHROUGH_PERIOD,
    make_file_bytes,
    make_file_tree,
    make_order_config,
    make_order,
    submit_next_proof,
    conservation_gap,
    assert_close,
)

__all__ = [
    "T0",
    "WALKTHROUGH_FEE",
    "WALKTHROUGH_PERIOD",
    "make_file_bytes",
    "make_file_tree",
    "make_order_config",
    "make_order",
    "submit_next_proof",
    "conservation_gap",
    "assert_close",
]
