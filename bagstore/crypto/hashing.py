"""
Module 02 - Hashing Utilities
SHA-256 primitives shared by the chunk hasher, the Merkle engine and the
order identity/record digests.

This module provides:
- SHA-256 hashing for raw bytes
- 256-bit integer <-> 32-byte big-endian conversions
- hash_uint256: the node hash used by the chunk Merkle tree
- Canonical hashing for objects (via dumps_canonical)
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Integers are always hashed as exactly 32 big-endian bytes
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
from typing import Any

from bagstore.schemas.canonical import dumps_canonical


UINT256_BYTES = 32
UINT256_MAX = (1 << 256) - 1


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def uint256_to_bytes(value: int) -> bytes:
    """
    Encode a 256-bit unsigned integer as 32 big-endian bytes.

    Raises:
        ValueError: If value is negative or wider than 256 bits
    """
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"Value out of uint256 range: {value}")
    return value.to_bytes(UINT256_BYTES, "big")


def bytes_to_uint256(data: bytes) -> int:
    """Decode up to 32 big-endian bytes into an unsigned integer."""
    if len(data) > UINT256_BYTES:
        raise ValueError(f"Expected at most {UINT256_BYTES} bytes, got {len(data)}")
    return int.from_bytes(data, "big")


def sha256_int(data: bytes) -> int:
    """SHA-256 of raw bytes, returned as a 256-bit integer."""
    return bytes_to_uint256(sha256(data))


def hash_uint256(value: int) -> int:
    """
    Hash a 256-bit integer.

    Rule: hash(v) = int(sha256(v as 32 big-endian bytes))

    This is the single node hash of the chunk Merkle tree; both the
    index-salted leaves and the XOR-combined parents go through it.

    Args:
        value: Unsigned integer < 2**256

    Returns:
        256-bit digest as an integer
    """
    return sha256_int(uint256_to_bytes(value))


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: sha256(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)

    Returns:
        32-byte SHA-256 digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def uint256_to_hex(value: int) -> str:
    """Format a 256-bit integer as a fixed-width 0x-prefixed hex string."""
    return to_hex(uint256_to_bytes(value))


def hex_to_uint256(hex_string: str) -> int:
    """Parse a 0x-prefixed hex string into a 256-bit integer."""
    return bytes_to_uint256(from_hex(hex_string))


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
