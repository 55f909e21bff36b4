"""
Order Record Codec

Compact binary record of an order's configuration and state, used for
persistence and for state digests in replay audits.

Layout (all integers big-endian, unsigned, fixed width):

    magic           4 bytes  b"BAGS"
    record_version  u8
    -- config --
    schema_version  str
    torrent_hash    u256
    owner           str
    merkle_root     u256
    file_size       u64
    chunk_size      u64
    storage_period  u64
    max_proof_span  u64
    treasury        str
    fee_rate        u16
    max_providers   u16
    whitelist       u16 count, then str each (sorted)
    -- state --
    total_fee       u128
    paid_out        u128
    reward_rate     u128
    period_finish   u64
    last_update     u64
    reward_per_share u256
    undistributed   u128
    dust            u128
    providers       u16 count, then per provider (sorted by id):
                    id str, joined_at u64, last_proof_at u64, paid u256,
                    earned u128, last_proof_valid u8, next_chunk u32
    balances        u16 count, then (id str, amount u128) (sorted by id)

Strings are u16-length-prefixed UTF-8.
"""
from __future__ import annotations

import struct
from typing import Tuple

from pydantic import ValidationError

from bagstore.crypto.hashing import sha256
from bagstore.ledger.reward_ledger import LedgerState
from bagstore.schemas.errors import RecordCodecError
from bagstore.schemas.order import OrderConfig, ProviderState
from bagstore.schemas.versioning import RECORD_VERSION, is_supported_record_version

from .state import OrderState

RECORD_MAGIC = b"BAGS"


# =============================================================================
# Primitive writers
# =============================================================================

def write_u8(n: int) -> bytes:
    return _pack(">B", n)


def write_u16(n: int) -> bytes:
    return _pack(">H", n)


def write_u32(n: int) -> bytes:
    return _pack(">I", n)


def write_u64(n: int) -> bytes:
    return _pack(">Q", n)


def write_u128(n: int) -> bytes:
    return _to_bytes(n, 16)


def write_u256(n: int) -> bytes:
    return _to_bytes(n, 32)


def write_str(s: str) -> bytes:
    raw = s.encode("utf-8")
    return write_u16(len(raw)) + raw


def _pack(fmt: str, n: int) -> bytes:
    try:
        return struct.pack(fmt, n)
    except struct.error as e:
        raise RecordCodecError(f"Value {n} does not fit {fmt}", details={"value": n}) from e


def _to_bytes(n: int, width: int) -> bytes:
    try:
        return n.to_bytes(width, "big")
    except OverflowError as e:
        raise RecordCodecError(
            f"Value {n} does not fit {width * 8} bits", details={"value": n}
        ) from e


# =============================================================================
# Primitive readers
# =============================================================================

def _unpack(fmt: str, data: bytes, offset: int) -> Tuple[int, int]:
    try:
        value = struct.unpack_from(fmt, data, offset)[0]
    except struct.error as e:
        raise RecordCodecError(f"Record truncated at offset {offset}") from e
    return value, offset + struct.calcsize(fmt)


def read_u8(data: bytes, offset: int) -> Tuple[int, int]:
    return _unpack(">B", data, offset)


def read_u16(data: bytes, offset: int) -> Tuple[int, int]:
    return _unpack(">H", data, offset)


def read_u32(data: bytes, offset: int) -> Tuple[int, int]:
    return _unpack(">I", data, offset)


def read_u64(data: bytes, offset: int) -> Tuple[int, int]:
    return _unpack(">Q", data, offset)


def _read_fixed(data: bytes, offset: int, width: int) -> Tuple[bytes, int]:
    end = offset + width
    if end > len(data):
        raise RecordCodecError(f"Record truncated at offset {offset}")
    return data[offset:end], end


def read_u128(data: bytes, offset: int) -> Tuple[int, int]:
    raw, offset = _read_fixed(data, offset, 16)
    return int.from_bytes(raw, "big"), offset


def read_u256(data: bytes, offset: int) -> Tuple[int, int]:
    raw, offset = _read_fixed(data, offset, 32)
    return int.from_bytes(raw, "big"), offset


def read_str(data: bytes, offset: int) -> Tuple[str, int]:
    length, offset = read_u16(data, offset)
    raw, offset = _read_fixed(data, offset, length)
    try:
        return raw.decode("utf-8"), offset
    except UnicodeDecodeError as e:
        raise RecordCodecError(f"Invalid UTF-8 string at offset {offset - length}") from e


# =============================================================================
# Record
# =============================================================================

def _encode_config(config: OrderConfig) -> bytes:
    data = bytearray()
    data.extend(write_str(config.schema_version))
    data.extend(write_u256(config.torrent_hash))
    data.extend(write_str(config.owner))
    data.extend(write_u256(config.merkle_root))
    data.extend(write_u64(config.file_size))
    data.extend(write_u64(config.chunk_size))
    data.extend(write_u64(config.storage_period))
    data.extend(write_u64(config.max_proof_span))
    data.extend(write_str(config.treasury))
    data.extend(write_u16(config.treasury_fee_rate))
    data.extend(write_u16(config.max_providers))
    whitelist = sorted(config.whitelist)
    data.extend(write_u16(len(whitelist)))
    for provider_id in whitelist:
        data.extend(write_str(provider_id))
    return bytes(data)


def _decode_config(data: bytes, offset: int) -> Tuple[OrderConfig, int]:
    fields = {}
    fields["schema_version"], offset = read_str(data, offset)
    fields["torrent_hash"], offset = read_u256(data, offset)
    fields["owner"], offset = read_str(data, offset)
    fields["merkle_root"], offset = read_u256(data, offset)
    fields["file_size"], offset = read_u64(data, offset)
    fields["chunk_size"], offset = read_u64(data, offset)
    fields["storage_period"], offset = read_u64(data, offset)
    fields["max_proof_span"], offset = read_u64(data, offset)
    fields["treasury"], offset = read_str(data, offset)
    fields["treasury_fee_rate"], offset = read_u16(data, offset)
    fields["max_providers"], offset = read_u16(data, offset)
    count, offset = read_u16(data, offset)
    whitelist = []
    for _ in range(count):
        provider_id, offset = read_str(data, offset)
        whitelist.append(provider_id)
    fields["whitelist"] = frozenset(whitelist)
    try:
        return OrderConfig(**fields), offset
    except ValidationError as e:
        raise RecordCodecError("Record holds an invalid order config", details={"errors": e.errors()}) from e


def _encode_state(state: OrderState) -> bytes:
    ledger = state.ledger
    data = bytearray()
    data.extend(write_u128(state.total_fee))
    data.extend(write_u128(state.paid_out))
    data.extend(write_u128(ledger.reward_rate))
    data.extend(write_u64(ledger.period_finish))
    data.extend(write_u64(ledger.last_update_time))
    data.extend(write_u256(ledger.reward_per_share))
    data.extend(write_u128(ledger.undistributed))
    data.extend(write_u128(ledger.dust))

    data.extend(write_u16(len(state.providers)))
    for provider_id in sorted(state.providers):
        provider = state.providers[provider_id]
        data.extend(write_str(provider_id))
        data.extend(write_u64(provider.joined_at))
        data.extend(write_u64(provider.last_proof_at))
        data.extend(write_u256(provider.reward_per_share_paid))
        data.extend(write_u128(provider.earned))
        data.extend(write_u8(1 if provider.last_proof_valid else 0))
        data.extend(write_u32(provider.next_chunk_index))

    data.extend(write_u16(len(state.balances)))
    for provider_id in sorted(state.balances):
        data.extend(write_str(provider_id))
        data.extend(write_u128(state.balances[provider_id]))
    return bytes(data)


def _decode_state(data: bytes, offset: int) -> Tuple[OrderState, int]:
    total_fee, offset = read_u128(data, offset)
    paid_out, offset = read_u128(data, offset)
    reward_rate, offset = read_u128(data, offset)
    period_finish, offset = read_u64(data, offset)
    last_update_time, offset = read_u64(data, offset)
    reward_per_share, offset = read_u256(data, offset)
    undistributed, offset = read_u128(data, offset)
    dust, offset = read_u128(data, offset)
    ledger = LedgerState(
        reward_rate=reward_rate,
        period_finish=period_finish,
        last_update_time=last_update_time,
        reward_per_share=reward_per_share,
        undistributed=undistributed,
        dust=dust,
    )

    providers: dict[str, ProviderState] = {}
    count, offset = read_u16(data, offset)
    for _ in range(count):
        provider_id, offset = read_str(data, offset)
        joined_at, offset = read_u64(data, offset)
        last_proof_at, offset = read_u64(data, offset)
        paid, offset = read_u256(data, offset)
        earned, offset = read_u128(data, offset)
        valid, offset = read_u8(data, offset)
        next_chunk, offset = read_u32(data, offset)
        if valid not in (0, 1):
            raise RecordCodecError(f"Invalid proof flag {valid} for provider {provider_id}")
        providers[provider_id] = ProviderState(
            joined_at=joined_at,
            last_proof_at=last_proof_at,
            reward_per_share_paid=paid,
            earned=earned,
            last_proof_valid=bool(valid),
            next_chunk_index=next_chunk,
        )

    balances: dict[str, int] = {}
    count, offset = read_u16(data, offset)
    for _ in range(count):
        provider_id, offset = read_str(data, offset)
        balances[provider_id], offset = read_u128(data, offset)

    state = OrderState(
        total_fee=total_fee,
        ledger=ledger,
        providers=providers,
        balances=balances,
        paid_out=paid_out,
    )
    return state, offset


def encode_order(config: OrderConfig, state: OrderState) -> bytes:
    """
    Encode an order to its binary record.

    Raises:
        RecordCodecError: If a value does not fit its field width
    """
    if len(state.providers) > 0xFFFF or len(state.balances) > 0xFFFF:
        raise RecordCodecError("Too many entries for a u16 count")
    return RECORD_MAGIC + write_u8(RECORD_VERSION) + _encode_config(config) + _encode_state(state)


def decode_order(data: bytes) -> Tuple[OrderConfig, OrderState]:
    """
    Decode a binary record.

    Raises:
        RecordCodecError: On bad magic, unsupported version, truncation,
            trailing bytes or invalid field values
    """
    if data[:4] != RECORD_MAGIC:
        raise RecordCodecError("Not an order record", details={"magic": data[:4].hex()})
    version, offset = read_u8(data, 4)
    if not is_supported_record_version(version):
        raise RecordCodecError(
            f"Unsupported record version {version}", details={"version": version}
        )
    config, offset = _decode_config(data, offset)
    state, offset = _decode_state(data, offset)
    if offset != len(data):
        raise RecordCodecError(f"{len(data) - offset} trailing bytes after record")
    return config, state


def state_digest(config: OrderConfig, state: OrderState) -> str:
    """Hex SHA-256 of the order record."""
    return sha256(encode_order(config, state)).hex()
