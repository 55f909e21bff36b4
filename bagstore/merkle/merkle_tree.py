"""
Module 02 - Merkle Tree Implementation
Chunk Merkle tree construction, proof generation, and verification.

Canonical Commitment Rules (Hard Contracts):
1. Leaf: leaf_i = hash_uint256(chunk_value_i XOR i)
   - Implemented via bagstore.merkle.chunking.salted_leaf()
2. Parent hashing: parent = hash_uint256(left XOR right)
   - Symmetric: verification needs sibling values only, not orientation
3. Padding rule: Pair an odd trailing node with EMPTY_NODE (0)
4. Empty leaves: rejected, a file has at least one chunk
5. Single leaf: root = leaf, proof is empty

Determinism Notes:
- No randomness or non-deterministic ordering
- Leaf ordering is the chunk order of the file
- Proof length is always ceil(log2(leaf_count))
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from bagstore.crypto.hashing import hash_uint256
from bagstore.merkle.chunking import salted_leaf


# Padding sentinel for odd-length levels
EMPTY_NODE: int = 0


@dataclass(frozen=True)
class ChunkProof:
    """
    A Merkle proof for a single chunk.

    Attributes:
        index: The 0-based chunk index
        siblings: Sibling values from leaf level to just below the root
        root: The Merkle root this proof is against
    """
    index: int
    siblings: list[int]
    root: int

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")


def merkle_parent(left: int, right: int) -> int:
    """
    Compute the parent of two child nodes.

    Parent hash is symmetric: hash_uint256(left ^ right)
    """
    return hash_uint256(left ^ right)


def proof_length(leaf_count: int) -> int:
    """
    Number of siblings in a proof: ceil(log2(leaf_count)).

    Raises:
        ValueError: If leaf_count < 1
    """
    if leaf_count < 1:
        raise ValueError(f"Tree must have at least one leaf, got {leaf_count}")
    return (leaf_count - 1).bit_length()


def _level_up(level: list[int]) -> list[int]:
    if len(level) % 2 == 1:
        level = level + [EMPTY_NODE]
    return [merkle_parent(level[i], level[i + 1]) for i in range(0, len(level), 2)]


def build_merkle_levels(leaves: Sequence[int]) -> list[list[int]]:
    """
    Build every level of the tree, leaves first, root level last.

    Raises:
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")

    levels: list[list[int]] = [list(leaves)]
    while len(levels[-1]) > 1:
        levels.append(_level_up(levels[-1]))
    return levels


def build_merkle_root(leaves: Sequence[int]) -> int:
    """
    Build the Merkle root from a sequence of leaves.

    Algorithm:
    1. If single leaf: return the leaf itself
    2. Otherwise, iteratively build levels:
       - If odd number of nodes, pad with EMPTY_NODE
       - Combine adjacent nodes with merkle_parent
       - Repeat until a single root remains

    Example: [a, b, c] -> [a, b, c, 0] -> [parent(a,b), parent(c,0)]

    Raises:
        ValueError: If leaves is empty
    """
    return build_merkle_levels(leaves)[-1][0]


def build_merkle_proof(leaves: Sequence[int], index: int) -> ChunkProof:
    """
    Generate the proof path for the leaf at the given index.

    At each level the sibling is chosen by parity of the running index:
    even -> right neighbour, odd -> left neighbour. A missing right
    neighbour is the EMPTY_NODE padding.

    Raises:
        IndexError: If index is out of range
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot generate proof for empty leaf list")

    if index < 0 or index >= len(leaves):
        raise IndexError(
            f"Leaf index {index} out of range for {len(leaves)} leaves"
        )

    levels = build_merkle_levels(leaves)
    siblings: list[int] = []
    current_index = index

    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        else:
            siblings.append(EMPTY_NODE)
        current_index //= 2

    return ChunkProof(index=index, siblings=siblings, root=levels[-1][0])


def fold_proof(leaf: int, siblings: Sequence[int]) -> int:
    """Fold a proof path upward from a leaf and return the computed root."""
    current = leaf
    for sibling in siblings:
        current = merkle_parent(current, sibling)
    return current


def verify_chunk_proof(
    chunk_value: int,
    index: int,
    siblings: Sequence[int],
    root: int,
    leaf_count: int,
) -> bool:
    """
    Verify that a chunk value sits at `index` in the tree with `root`.

    Pure and stateless. Rejects (returns False for) proofs whose length is
    not ceil(log2(leaf_count)), indexes outside the tree and empty trees.

    Args:
        chunk_value: sha256 of the raw chunk, as an integer
        index: Chunk index the proof is for
        siblings: Proof path, leaf level first
        root: Expected Merkle root
        leaf_count: Number of chunks in the file

    Returns:
        True if the proof is valid, False otherwise
    """
    if leaf_count < 1 or index < 0 or index >= leaf_count:
        return False
    if len(siblings) != proof_length(leaf_count):
        return False
    if any(s < 0 or s >> 256 for s in siblings):
        return False
    if chunk_value < 0 or chunk_value >> 256:
        return False

    return fold_proof(salted_leaf(chunk_value, index), siblings) == root


__all__ = [
    "EMPTY_NODE",
    "ChunkProof",
    "merkle_parent",
    "proof_length",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "fold_proof",
    "verify_chunk_proof",
]
