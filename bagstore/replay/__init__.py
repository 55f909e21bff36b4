"""
Module 08 - Replay

Deterministic re-execution of order operation logs for audits.
"""
from .replay_executor import (
    OrderEvent,
    OrderOp,
    ReplayExecutor,
    ReplayOutcome,
    ReplayResult,
    ReplayVerification,
    verify_replay,
)

__all__ = [
    "OrderEvent",
    "OrderOp",
    "ReplayExecutor",
    "ReplayOutcome",
    "ReplayResult",
    "ReplayVerification",
    "verify_replay",
]
