"""
Module 01 - Schemas & Canonicalization
File: versioning.py

Purpose: Centralize schema and persisted-record version constants.
No imports from other schema files to avoid circular dependencies.
"""

from typing import Literal

# Current schema version - used across all models
SCHEMA_VERSION: str = "v1"

# Version byte written at the head of every persisted order record
RECORD_VERSION: int = 1

SchemaVersion = Literal["v1"]

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})
SUPPORTED_RECORD_VERSIONS: frozenset[int] = frozenset({1})


class UnsupportedSchemaVersionError(ValueError):
    """Raised when an unsupported schema version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_SCHEMA_VERSIONS
        super().__init__(
            f"Unsupported schema version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def assert_supported_schema_version(version: str) -> None:
    """
    Validate that the given schema version is supported.

    Raises:
        UnsupportedSchemaVersionError: If the version is not supported.
    """
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(version)


def is_supported_record_version(version: int) -> bool:
    """Check if a persisted record version can be decoded."""
    return version in SUPPORTED_RECORD_VERSIONS
