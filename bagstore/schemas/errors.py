"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Error taxonomy for storage orders and the order book.
Defines both a Pydantic model for structured error communication
and Python exceptions for control flow. Every failed operation raises
exactly one of the exceptions below; there is no catch-all.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Access control
    UNAUTHORIZED = "UNAUTHORIZED"

    # Order placement (order book)
    NOT_ENOUGH_STORAGE_FEE = "NOT_ENOUGH_STORAGE_FEE"
    DUPLICATED_TORRENT_HASH = "DUPLICATED_TORRENT_HASH"
    FILE_TOO_SMALL = "FILE_TOO_SMALL"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    STORAGE_PERIOD_TOO_SHORT = "STORAGE_PERIOD_TOO_SHORT"

    # Provider lifecycle & proofs
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    INVALID_PROOF = "INVALID_PROOF"
    UNREGISTERED_PROVIDER = "UNREGISTERED_PROVIDER"
    ORDER_UNEXPIRED = "ORDER_UNEXPIRED"
    MAX_PROVIDERS_EXCEEDED = "MAX_PROVIDERS_EXCEEDED"

    # Host-side failures
    PAYOUT_FAILED = "PAYOUT_FAILED"
    RECORD_CODEC_ERROR = "RECORD_CODEC_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"


# Numeric exit codes, compatible with the on-chain protocol where one exists
EXIT_CODES: dict[str, int] = {
    ErrorCodes.UNAUTHORIZED: 401,
    ErrorCodes.NOT_ENOUGH_STORAGE_FEE: 1001,
    ErrorCodes.DUPLICATED_TORRENT_HASH: 1002,
    ErrorCodes.FILE_TOO_SMALL: 1003,
    ErrorCodes.FILE_TOO_LARGE: 1004,
    ErrorCodes.STORAGE_PERIOD_TOO_SHORT: 1005,
    ErrorCodes.ALREADY_REGISTERED: 1006,
    ErrorCodes.INVALID_PROOF: 1007,
    ErrorCodes.UNREGISTERED_PROVIDER: 1008,
    ErrorCodes.ORDER_UNEXPIRED: 1009,
    ErrorCodes.MAX_PROVIDERS_EXCEEDED: 1011,
    ErrorCodes.PAYOUT_FAILED: 1100,
    ErrorCodes.RECORD_CODEC_ERROR: 1101,
    ErrorCodes.CANONICALIZATION_ERROR: 1102,
}


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class StorageError(BaseModel):
    """
    Structured error, used where failures are recorded rather than raised
    (replay outcomes, host responses).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_PROOF],
    )
    exit_code: int = Field(
        ...,
        description="Numeric protocol exit code",
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "StorageException":
        """Convert this error model to a raised exception."""
        return StorageException(
            message=self.message,
            code=self.code,
            details=self.details,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class StorageException(Exception):
    """
    Base exception for all storage-order errors.

    Carries structured error information and converts to StorageError.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORAGE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    @property
    def exit_code(self) -> int:
        return EXIT_CODES.get(self.code, 1)

    def to_error_model(self) -> StorageError:
        """Convert this exception to a StorageError model."""
        return StorageError(
            code=self.code,
            exit_code=self.exit_code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class UnauthorizedException(StorageException):
    """Caller lacks the role required for the attempted mutation."""

    def __init__(
        self,
        message: str,
        caller: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if caller is not None:
            full_details["caller"] = caller
        super().__init__(message=message, code=ErrorCodes.UNAUTHORIZED, details=full_details)


class _ProviderException(StorageException):
    """Shared constructor for errors about one provider."""

    error_code = "STORAGE_ERROR"

    def __init__(
        self,
        message: str,
        provider_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if provider_id is not None:
            full_details["provider_id"] = provider_id
        super().__init__(message=message, code=self.error_code, details=full_details)


class AlreadyRegisteredException(_ProviderException):
    """Duplicate registration by the same provider."""

    error_code = ErrorCodes.ALREADY_REGISTERED


class UnregisteredProviderException(_ProviderException):
    """Operation requiring membership attempted by a non-member."""

    error_code = ErrorCodes.UNREGISTERED_PROVIDER


class MaxProvidersExceededException(_ProviderException):
    """Registration attempted while the provider set is full."""

    error_code = ErrorCodes.MAX_PROVIDERS_EXCEEDED


class InvalidProofException(_ProviderException):
    """Submitted Merkle proof failed verification (provider not whitelisted)."""

    error_code = ErrorCodes.INVALID_PROOF

    def __init__(
        self,
        message: str,
        provider_id: str | None = None,
        chunk_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if chunk_index is not None:
            full_details["chunk_index"] = chunk_index
        super().__init__(message=message, provider_id=provider_id, details=full_details)


class OrderUnexpiredException(StorageException):
    """Recycle attempted before the storage period finished."""

    def __init__(
        self,
        message: str,
        period_finish: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if period_finish is not None:
            full_details["period_finish"] = period_finish
        super().__init__(message=message, code=ErrorCodes.ORDER_UNEXPIRED, details=full_details)


class OrderRejectedException(StorageException):
    """Base class for order-book placement rejections."""

    error_code = "ORDER_REJECTED"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=self.error_code, details=details)


class NotEnoughStorageFeeException(OrderRejectedException):
    error_code = ErrorCodes.NOT_ENOUGH_STORAGE_FEE


class DuplicatedTorrentHashException(OrderRejectedException):
    error_code = ErrorCodes.DUPLICATED_TORRENT_HASH


class FileTooSmallException(OrderRejectedException):
    error_code = ErrorCodes.FILE_TOO_SMALL


class FileTooLargeException(OrderRejectedException):
    error_code = ErrorCodes.FILE_TOO_LARGE


class StoragePeriodTooShortException(OrderRejectedException):
    error_code = ErrorCodes.STORAGE_PERIOD_TOO_SHORT


class PayoutFailedException(StorageException):
    """The payout sink refused a transfer; the operation was not committed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=ErrorCodes.PAYOUT_FAILED, details=details)


class RecordCodecError(StorageException):
    """A persisted order record could not be encoded or decoded."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=ErrorCodes.RECORD_CODEC_ERROR, details=details)


class CanonicalizationException(StorageException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=ErrorCodes.CANONICALIZATION_ERROR, details=details)

