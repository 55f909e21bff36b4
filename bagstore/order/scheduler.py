"""
Module 05 - Proof Scheduler
Which chunk a provider must prove next, by when, and whether a submitted
proof is acceptable.

Rules:
1. Whitelisted providers pass every proof check, Merkle and deadline alike
2. Everyone else must prove chunk `next_chunk_index` against the order's
   Merkle root
3. A proof is on time if it lands at or before last_proof_at + max_proof_span
4. After any accepted proof the schedule advances:
   next_chunk_index = (next_chunk_index + 1) mod chunk_count
"""
from __future__ import annotations

import logging
from typing import Callable, Sequence, Union

from bagstore.merkle.chunking import chunk_hash
from bagstore.merkle.merkle_tree import verify_chunk_proof
from bagstore.schemas.errors import InvalidProofException
from bagstore.schemas.order import OrderConfig, ProviderState

logger = logging.getLogger(__name__)


# Raw chunk bytes, or the sha256 chunk value as an integer
ChunkValue = Union[bytes, int]


def resolve_chunk_value(chunk_value: ChunkValue) -> int:
    """Chunk hash of a submission: hash raw bytes, pass integers through."""
    if isinstance(chunk_value, (bytes, bytearray)):
        return chunk_hash(bytes(chunk_value))
    if isinstance(chunk_value, bool) or not isinstance(chunk_value, int):
        raise TypeError(f"Chunk value must be bytes or int, got {type(chunk_value).__name__}")
    return chunk_value


class ProofScheduler:
    """Proof validation and scheduling for one order."""

    def __init__(self, config: OrderConfig, is_whitelisted: Callable[[str], bool]) -> None:
        self.config = config
        self._is_whitelisted = is_whitelisted

    def expected_chunk(self, provider: ProviderState) -> int:
        return provider.next_chunk_index

    def deadline(self, provider: ProviderState) -> int:
        return provider.next_proof_due_at(self.config.max_proof_span)

    def is_on_time(self, provider: ProviderState, now: int) -> bool:
        return now <= self.deadline(provider)

    def counts_interval(self, provider_id: str, provider: ProviderState, now: int) -> bool:
        """Whether the interval since the provider's last proof earns reward."""
        return self._is_whitelisted(provider_id) or self.is_on_time(provider, now)

    def check(
        self,
        provider_id: str,
        provider: ProviderState,
        chunk_value: ChunkValue,
        proof_path: Sequence[int],
    ) -> None:
        """
        Validate a submitted proof.

        Raises:
            InvalidProofException: If the provider is not whitelisted and the
                proof does not verify for its expected chunk
        """
        if self._is_whitelisted(provider_id):
            logger.debug("Accepting proof from whitelisted provider %s", provider_id)
            return

        index = self.expected_chunk(provider)
        try:
            value = resolve_chunk_value(chunk_value)
        except TypeError as e:
            raise InvalidProofException(
                str(e), provider_id=provider_id, chunk_index=index
            ) from e

        if not verify_chunk_proof(
            value,
            index,
            list(proof_path),
            self.config.merkle_root,
            self.config.chunk_count,
        ):
            logger.warning("Rejected proof from %s for chunk %d", provider_id, index)
            raise InvalidProofException(
                f"Proof for chunk {index} does not match the order's Merkle root",
                provider_id=provider_id,
                chunk_index=index,
            )

    def advance(self, provider: ProviderState, now: int, valid: bool) -> None:
        """Move the provider's schedule past an accepted proof."""
        provider.next_chunk_index = (provider.next_chunk_index + 1) % self.config.chunk_count
        provider.last_proof_at = now
        provider.last_proof_valid = valid
