"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export versioning, canonical serialization and the error
taxonomy. The order data model lives in bagstore.schemas.order and is
imported from there directly (it depends on the Merkle chunking rules).
"""

# Version constants
from .versioning import (
    RECORD_VERSION,
    SCHEMA_VERSION,
    SUPPORTED_RECORD_VERSIONS,
    SUPPORTED_SCHEMA_VERSIONS,
    SchemaVersion,
    UnsupportedSchemaVersionError,
    assert_supported_schema_version,
    is_supported_record_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    EXIT_CODES,
    AlreadyRegisteredException,
    CanonicalizationException,
    DuplicatedTorrentHashException,
    ErrorCodes,
    FileTooLargeException,
    FileTooSmallException,
    InvalidProofException,
    MaxProvidersExceededException,
    NotEnoughStorageFeeException,
    OrderRejectedException,
    OrderUnexpiredException,
    PayoutFailedException,
    RecordCodecError,
    StorageError,
    StorageException,
    StoragePeriodTooShortException,
    UnauthorizedException,
    UnregisteredProviderException,
)

__all__ = [
    "RECORD_VERSION",
    "SCHEMA_VERSION",
    "SUPPORTED_RECORD_VERSIONS",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SchemaVersion",
    "UnsupportedSchemaVersionError",
    "assert_supported_schema_version",
    "is_supported_record_version",
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    "EXIT_CODES",
    "AlreadyRegisteredException",
    "CanonicalizationException",
    "DuplicatedTorrentHashException",
    "ErrorCodes",
    "FileTooLargeException",
    "FileTooSmallException",
    "InvalidProofException",
    "MaxProvidersExceededException",
    "NotEnoughStorageFeeException",
    "OrderRejectedException",
    "OrderUnexpiredException",
    "PayoutFailedException",
    "RecordCodecError",
    "StorageError",
    "StorageException",
    "StoragePeriodTooShortException",
    "UnauthorizedException",
    "UnregisteredProviderException",
]
