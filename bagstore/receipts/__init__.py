"""
Receipts Module

Transfer receipts for funds leaving an order and the payout sink that
executes them.
"""

from .models import Transfer, TransferKind
from .recorder import PayoutSink, TransferRecorder

__all__ = [
    "Transfer",
    "TransferKind",
    "PayoutSink",
    "TransferRecorder",
]
