"""
Module 02 - Chunk Merkle Tree
Chunking, index-salted Merkle tree construction, proof generation and
verification.

This module provides:
- chunk_size / chunk_count: derive the chunk layout from the file size
- chunk_hash / salted_leaf: chunk value and leaf hashing
- build_merkle_root / build_merkle_proof / verify_chunk_proof
- FileMerkleTree / ChunkVerifier: file-level convenience wrappers

Usage:
    from bagstore.merkle import FileMerkleTree, verify_chunk_proof, chunk_hash

    tree = FileMerkleTree.from_path("bag.zip")
    proof = tree.proof(5)
    assert verify_chunk_proof(
        chunk_hash(tree.chunk(5)), 5, proof.siblings, tree.root, tree.chunk_count
    )
"""
from .chunking import (
    MIN_CHUNK_SIZE,
    TARGET_CHUNK_COUNT,
    chunk_size,
    chunk_count,
    chunk_hash,
    salted_leaf,
    split_chunks,
    iter_file_chunks,
)

from .merkle_tree import (
    EMPTY_NODE,
    ChunkProof,
    merkle_parent,
    proof_length,
    build_merkle_levels,
    build_merkle_root,
    build_merkle_proof,
    fold_proof,
    verify_chunk_proof,
)

from .merkle_proofs import (
    FileMerkleTree,
    ChunkVerifier,
)


__all__ = [
    # Chunking
    "MIN_CHUNK_SIZE",
    "TARGET_CHUNK_COUNT",
    "chunk_size",
    "chunk_count",
    "chunk_hash",
    "salted_leaf",
    "split_chunks",
    "iter_file_chunks",
    # Core types
    "EMPTY_NODE",
    "ChunkProof",
    # Core functions
    "merkle_parent",
    "proof_length",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "fold_proof",
    "verify_chunk_proof",
    # Convenience classes
    "FileMerkleTree",
    "ChunkVerifier",
]
