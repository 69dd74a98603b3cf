"""PromptVault Error Handling Module

This module defines the error handling system for PromptVault, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- User-friendly Messages: Errors can be converted to user-friendly messages
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# additional_data keys whose values safe_dict masks
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("anon_key", "api_key", "apikey", "authorization")
MASKED_VALUE = "***"


class ErrorCode(str, Enum):
    """Error codes for PromptVault application.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Durable Store Errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    STORAGE_QUOTA_EXCEEDED = "STORAGE_QUOTA_EXCEEDED"

    # Cache Errors
    CACHE_DESERIALIZATION_FAILED = "CACHE_DESERIALIZATION_FAILED"
    CACHE_SERIALIZATION_ERROR = "CACHE_SERIALIZATION_ERROR"
    CACHE_CORRUPTED = "CACHE_CORRUPTED"
    INVALID_VERSION_TAG = "INVALID_VERSION_TAG"

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_AUTHENTICATION_FAILED = "API_AUTHENTICATION_FAILED"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    MISSING_CONFIG = "MISSING_CONFIG"

    # CLI Errors
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_COMMAND_INTERRUPTED = "CLI_COMMAND_INTERRUPTED"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContextModel:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization and prevent
    sensitive data leakage.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only.
            Credential entries are masked by safe_dict.
    """

    file_path: str | None = None
    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with credential masking.

        Args:
            mask_keys: additional_data keys (case-insensitive) whose values
                are replaced by MASKED_VALUE. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked credentials and guaranteed additional_data key.

        Example:
            >>> context = ErrorContextModel(operation="fetch", additional_data={"anon_key": "abc"})
            >>> context.safe_dict()
            {'operation': 'fetch', 'additional_data': {'anon_key': '***'}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS
        masked = {key.lower() for key in mask_keys}

        data: dict[str, Any] = {}
        if self.file_path is not None:
            data["file_path"] = self.file_path
        if self.operation is not None:
            data["operation"] = self.operation

        data["additional_data"] = {
            key: MASKED_VALUE if key.lower() in masked else value
            for key, value in (self.additional_data or {}).items()
        }
        return data


ErrorContext = ErrorContextModel


class PromptVaultError(Exception):
    """Base exception class for all PromptVault errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize PromptVaultError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with PII masking.

        Returns:
            Dictionary representation of the error with code, message,
            masked context, and original_error (if present)
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(PromptVaultError):
    """Domain-specific errors.

    These errors occur when business rules are violated or stored data
    does not match the expected domain shape.

    Examples:
    - Invalid version tag
    - Cached payload that no longer matches the content models
    """


class InfrastructureError(PromptVaultError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems
    like the durable store, the file system or the remote content service.
    """


class StorageUnavailableError(InfrastructureError):
    """The durable client-local store cannot be read or written.

    Raised by key-value store backends when storage is disabled, full
    (quota exceeded) or otherwise inaccessible. The cache manager treats
    it as a cache miss.
    """


class DeserializationError(DomainError):
    """A stored value does not parse back into the expected shape.

    Covers corrupted entries and entries written by an incompatible
    earlier version. The cache manager treats it as a cache miss.
    """


class ContentServiceError(InfrastructureError):
    """Errors raised while talking to the remote content service.

    Examples:
    - Connection errors and timeouts
    - Authentication failures
    - Server errors and malformed responses
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status_code = status_code


class ApplicationError(PromptVaultError):
    """Application-level errors.

    These errors occur at the application layer, typically
    related to configuration, command handling, or application flow.
    """


class SecurityError(PromptVaultError):
    """Security-related errors.

    Examples:
    - Missing API keys or service credentials
    - Invalid authentication configuration
    """


def create_storage_unavailable_error(
    message: str,
    key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    code: ErrorCode = ErrorCode.STORAGE_UNAVAILABLE,
) -> StorageUnavailableError:
    """Create a storage unavailable error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"key": key} if key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return StorageUnavailableError(code, message, context, original_error)


def create_deserialization_error(
    message: str,
    key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DeserializationError:
    """Create a deserialization error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"key": key} if key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return DeserializationError(
        ErrorCode.CACHE_DESERIALIZATION_FAILED,
        message,
        context,
        original_error,
    )


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DomainError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return DomainError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )


class CliError(ApplicationError):
    """CLI-specific error with enhanced context for command-line operations."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def create_cli_error(
    message: str,
    command: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return CliError(
        ErrorCode.CLI_UNEXPECTED_ERROR,
        message,
        context,
        original_error,
        command,
        exit_code,
    )
