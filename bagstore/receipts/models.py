"""
Transfer Receipt Models

Schemas for money leaving an order: provider rewards, the treasury's fee
on those rewards, and recycled undistributed rewards.

Key Design Principles:
1. Amounts are integers in the smallest transferable unit
2. Receipt ids are derived from the canonical transfer, so a replayed
   operation log reproduces the same ids
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from bagstore.crypto.hashing import hash_canonical, to_hex


TransferKind = Literal["reward", "treasury_fee", "recycle"]


class Transfer(BaseModel):
    """A single movement of funds out of an order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    order_id: str = Field(..., description="Order the funds leave")
    recipient: str = Field(..., min_length=1, description="Identity receiving the funds")
    amount: int = Field(..., gt=0, description="Amount in the smallest unit")
    kind: TransferKind = Field(..., description="Why the funds move")
    at: int = Field(..., ge=0, description="Timestamp of the operation")

    @property
    def receipt_id(self) -> str:
        """Deterministic id: tr_{kind}_{hash prefix}."""
        return f"tr_{self.kind}_{to_hex(hash_canonical(self))[2:14]}"
