"""Exception hierarchy for the RPG prompt-context builder.

Context assembly never lets an error escape its public build operations;
these exceptions exist so that the individual lookups can signal *what*
failed before the assembler logs the failure and substitutes a default.

Example:
    >>> from rpg_context.core.exceptions import ContextLookupError
    >>> raise ContextLookupError("Location not found", operation="resolve_location")
"""

from __future__ import annotations

from typing import Any


class RpgContextError(Exception):
    """Base exception for all context-builder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(RpgContextError):
    """Raised when runtime configuration cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Context Assembly Exceptions
# =============================================================================


class ContextLookupError(RpgContextError):
    """Raised when a world lookup (location, region, disposition) fails.

    These are recoverable: the assembler logs them and continues with a
    default value.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize lookup error with the originating operation.

        Args:
            message: Human-readable error description.
            operation: Name of the lookup that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if operation:
            combined_details["operation"] = operation
        self.operation = operation
        super().__init__(message, details=combined_details)


class NormalizationError(RpgContextError):
    """Raised when an input value has a shape the normalizer cannot use."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        super().__init__(message, details=combined_details)


class StaticResourceError(RpgContextError):
    """Raised when a packaged static table cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize static resource error with the resource location.

        Args:
            message: Human-readable error description.
            resource: Path or name of the resource that failed to load.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if resource:
            combined_details["resource"] = resource
        super().__init__(message, details=combined_details)


__all__ = [
    "RpgContextError",
    "ConfigurationError",
    "ContextLookupError",
    "NormalizationError",
    "StaticResourceError",
]
