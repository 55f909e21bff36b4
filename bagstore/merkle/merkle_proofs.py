"""
Module 02 - Merkle Proofs Convenience Wrappers
File-level interface over the chunk Merkle functions.

This module provides:
- FileMerkleTree: build the tree of a whole file, hand out proofs
- ChunkVerifier: verify raw chunks or chunk hashes against a root
"""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

from bagstore.merkle.chunking import (
    chunk_hash,
    chunk_size,
    iter_file_chunks,
    salted_leaf,
    split_chunks,
)
from bagstore.merkle.merkle_tree import (
    ChunkProof,
    build_merkle_levels,
    verify_chunk_proof,
)


class FileMerkleTree:
    """
    Merkle tree over the chunks of one file.

    Keeps the chunk values and every tree level in memory, which is what
    a storage provider needs to answer proof requests.

    Example:
        >>> tree = FileMerkleTree.from_bytes(b"x" * 1000)
        >>> proof = tree.proof(3)
        >>> ChunkVerifier.verify_chunk(tree.chunk(3), 3, proof.siblings, tree.root, tree.chunk_count)
        True
    """

    def __init__(self, chunks: Sequence[bytes], file_size: int) -> None:
        if file_size <= 0 or not chunks:
            raise ValueError("Cannot build a Merkle tree for an empty file")
        self.file_size = file_size
        self.chunk_size = chunk_size(file_size)
        self._chunks = list(chunks)
        self.chunk_values = [chunk_hash(c) for c in self._chunks]
        leaves = [salted_leaf(v, i) for i, v in enumerate(self.chunk_values)]
        self._levels = build_merkle_levels(leaves)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileMerkleTree":
        """Build the tree of an in-memory file."""
        if not data:
            raise ValueError("Cannot build a Merkle tree for an empty file")
        return cls(split_chunks(data), len(data))

    @classmethod
    def from_path(cls, path: str | Path) -> "FileMerkleTree":
        """Build the tree of a file on disk."""
        path = Path(path)
        return cls(list(iter_file_chunks(path)), path.stat().st_size)

    @property
    def root(self) -> int:
        return self._levels[-1][0]

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def depth(self) -> int:
        """Number of levels above the leaves."""
        return len(self._levels) - 1

    def chunk(self, index: int) -> bytes:
        """Raw bytes of one chunk."""
        return self._chunks[index]

    def proof(self, index: int) -> ChunkProof:
        """
        Proof path for one chunk.

        Raises:
            IndexError: If index is out of range
        """
        if index < 0 or index >= self.chunk_count:
            raise IndexError(
                f"Chunk index {index} out of range for {self.chunk_count} chunks"
            )
        siblings: list[int] = []
        current = index
        for level in self._levels[:-1]:
            sibling = current ^ 1
            siblings.append(level[sibling] if sibling < len(level) else 0)
            current //= 2
        return ChunkProof(index=index, siblings=siblings, root=self.root)


class ChunkVerifier:
    """
    Convenience class for verifying chunk proofs.

    Provides static methods for verification from raw chunk bytes or from
    a precomputed chunk hash.
    """

    @staticmethod
    def verify_chunk(
        chunk: bytes,
        index: int,
        siblings: Sequence[int],
        root: int,
        chunk_count: int,
    ) -> bool:
        """Verify raw chunk bytes at `index` against `root`."""
        return verify_chunk_proof(chunk_hash(chunk), index, siblings, root, chunk_count)

    @staticmethod
    def verify_value(
        chunk_value: int,
        index: int,
        siblings: Sequence[int],
        root: int,
        chunk_count: int,
    ) -> bool:
        """Verify a precomputed chunk hash at `index` against `root`."""
        return verify_chunk_proof(chunk_value, index, siblings, root, chunk_count)


__all__ = [
    "FileMerkleTree",
    "ChunkVerifier",
]
