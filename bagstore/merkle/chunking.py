"""
Module 02 - Chunking
Chunk size derivation and chunk hashing.

Chunk Rules (Hard Contracts):
1. chunk_size = ceil(file_size / 128), never below 64 bytes
2. Chunks are consecutive, fixed-size; the last one may be short
3. Chunk value = sha256(raw chunk bytes) as a 256-bit integer
4. Leaf = hash_uint256(chunk_value XOR chunk_index)

The chunk size decides how many chunks exist, and therefore which chunk a
provider is asked to prove next, so it must be reproduced bit-exactly.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterator

from bagstore.crypto.hashing import hash_uint256, sha256_int


TARGET_CHUNK_COUNT = 128
MIN_CHUNK_SIZE = 64


def chunk_size(file_size: int) -> int:
    """
    Derive the chunk size for a file.

    Args:
        file_size: File size in bytes (must be positive)

    Returns:
        Chunk size in bytes

    Raises:
        ValueError: If file_size is not positive

    Example:
        >>> chunk_size(1000)
        64
        >>> chunk_size(12_800)
        100
        >>> chunk_size(12_801)
        101
    """
    if file_size <= 0:
        raise ValueError(f"File size must be positive, got {file_size}")
    size = -(-file_size // TARGET_CHUNK_COUNT)
    return max(size, MIN_CHUNK_SIZE)


def chunk_count(file_size: int) -> int:
    """Number of chunks a file of the given size is split into."""
    size = chunk_size(file_size)
    return -(-file_size // size)


def chunk_hash(chunk: bytes) -> int:
    """Chunk value: SHA-256 of the raw chunk bytes as a 256-bit integer."""
    return sha256_int(chunk)


def salted_leaf(chunk_value: int, index: int) -> int:
    """
    Merkle leaf for a chunk.

    The chunk index is folded into the value before hashing so a chunk
    cannot be proven at a different position, nor duplicated.
    """
    if index < 0:
        raise ValueError(f"Chunk index must be non-negative, got {index}")
    return hash_uint256(chunk_value ^ index)


def split_chunks(data: bytes) -> list[bytes]:
    """
    Split file contents into chunks of the derived size.

    Raises:
        ValueError: If data is empty
    """
    size = chunk_size(len(data))
    return [data[offset:offset + size] for offset in range(0, len(data), size)]


def iter_file_chunks(path: str | Path) -> Iterator[bytes]:
    """
    Stream the chunks of a file on disk without loading it whole.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty
    """
    path = Path(path)
    size = chunk_size(path.stat().st_size)
    with open(path, "rb") as f:
        while True:
            chunk = f.read(size)
            if not chunk:
                break
            yield chunk


__all__ = [
    "TARGET_CHUNK_COUNT",
    "MIN_CHUNK_SIZE",
    "chunk_size",
    "chunk_count",
    "chunk_hash",
    "salted_leaf",
    "split_chunks",
    "iter_file_chunks",
]
