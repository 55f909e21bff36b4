"""
Core cryptographic utilities.

Module 02 provides hashing utilities for chunk hashing, Merkle nodes and
record digests.
"""
from .hashing import (
    UINT256_BYTES,
    UINT256_MAX,
    sha256,
    sha256_int,
    uint256_to_bytes,
    bytes_to_uint256,
    hash_uint256,
    hash_canonical,
    to_hex,
    from_hex,
    uint256_to_hex,
    hex_to_uint256,
)

__all__ = [
    "UINT256_BYTES",
    "UINT256_MAX",
    "sha256",
    "sha256_int",
    "uint256_to_bytes",
    "bytes_to_uint256",
    "hash_uint256",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "uint256_to_hex",
    "hex_to_uint256",
]
