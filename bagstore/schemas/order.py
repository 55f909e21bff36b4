"""
Module 01 - Schemas & Canonicalization
File: order.py

Purpose: Data model of one storage order.

- OrderConfig: immutable parameters snapshotted when the order is placed
- ProviderState: per-provider proof schedule and reward bookkeeping
- OrderInfo: read-only view returned to observers
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from bagstore.merkle.chunking import chunk_count, chunk_size

from .versioning import SCHEMA_VERSION, assert_supported_schema_version

UINT256_MAX = (1 << 256) - 1
UINT64_MAX = (1 << 64) - 1

# Treasury fee rate is expressed in basis points
FEE_RATE_DENOMINATOR = 10_000


def _hex256(value: int) -> str:
    return f"0x{value:064x}"


class OrderConfig(BaseModel):
    """
    Immutable configuration of a storage order.

    Market parameters (proof span, fee rate, provider cap, whitelist) are
    copied in at placement time so later changes to the market only
    affect future orders.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    torrent_hash: int = Field(..., ge=0, le=UINT256_MAX, description="Content id of the bag")
    owner: str = Field(..., min_length=1, description="Identity that placed the order")
    merkle_root: int = Field(..., ge=0, le=UINT256_MAX, description="Root of the chunk tree")
    file_size: int = Field(..., gt=0, le=UINT64_MAX, description="File size in bytes")
    chunk_size: int = Field(default=0, description="Derived from file_size")
    storage_period: int = Field(..., gt=0, le=UINT64_MAX, description="Storage period in seconds")
    max_proof_span: int = Field(..., gt=0, le=UINT64_MAX, description="Max seconds between proofs")
    treasury: str = Field(..., min_length=1)
    treasury_fee_rate: int = Field(default=0, ge=0, le=FEE_RATE_DENOMINATOR)
    max_providers: int = Field(..., ge=1, le=0xFFFF)
    whitelist: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="before")
    @classmethod
    def _derive_chunk_size(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("chunk_size"):
            size = data.get("file_size")
            if isinstance(size, int) and size > 0:
                data = {**data, "chunk_size": chunk_size(size)}
        return data

    @model_validator(mode="after")
    def _check_chunk_size(self) -> "OrderConfig":
        expected = chunk_size(self.file_size)
        if self.chunk_size != expected:
            raise ValueError(
                f"chunk_size {self.chunk_size} does not match derived size {expected}"
            )
        return self

    @field_validator("schema_version")
    @classmethod
    def _check_schema_version(cls, value: str) -> str:
        assert_supported_schema_version(value)
        return value

    @field_validator("torrent_hash", "merkle_root", mode="before")
    @classmethod
    def _parse_hex(cls, value: Any) -> Any:
        if isinstance(value, str) and value.startswith("0x"):
            return int(value, 16)
        return value

    @field_serializer("torrent_hash", "merkle_root")
    def _serialize_hash(self, value: int) -> str:
        return _hex256(value)

    @field_serializer("whitelist")
    def _serialize_whitelist(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    @property
    def chunk_count(self) -> int:
        """Number of chunks the file is split into."""
        return chunk_count(self.file_size)

    def is_whitelisted(self, provider_id: str) -> bool:
        return provider_id in self.whitelist


class ProviderState(BaseModel):
    """
    Bookkeeping for one registered provider.

    `last_proof_at` starts at the registration time; the next proof is due
    at `last_proof_at + max_proof_span`.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    joined_at: int = Field(..., ge=0)
    last_proof_at: int = Field(..., ge=0)
    reward_per_share_paid: int = Field(default=0, ge=0)
    earned: int = Field(default=0, ge=0)
    last_proof_valid: bool = Field(default=True)
    next_chunk_index: int = Field(default=0, ge=0)

    def next_proof_due_at(self, max_proof_span: int) -> int:
        return self.last_proof_at + max_proof_span


class OrderInfo(BaseModel):
    """Read-only summary of an order for observers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    order_id: str
    config: OrderConfig
    total_fee: int
    reward_rate: int
    started: bool
    period_finish: int
    total_providers: int
    undistributed_rewards: int
    balance: int
