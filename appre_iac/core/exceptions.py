"""
Exception hierarchy for Appre infrastructure definitions.

Provides layered exception structure for naming, tagging and policy errors.
All exceptions include context for debugging a failed deployment definition.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the infrastructure package
"""

from typing import Any


class AppreInfraError(Exception):
    """Base exception for all infrastructure definition errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(AppreInfraError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidNamingConfigError(ValidationError):
    """Raised when the application identity or environment is not a safe token."""


class InvalidEnvironmentError(ValidationError):
    """Raised when the environment is not on the configured allow-list."""

    def __init__(
        self,
        environment: str,
        allowed: list[str] | tuple[str, ...],
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["allowed"] = list(allowed)
        super().__init__(
            f"ENVIRONMENT must be one of: {', '.join(allowed)} (got {environment!r})",
            field="environment",
            details=details,
        )
        self.environment = environment


class InvalidBaseNameError(ValidationError):
    """Raised when a logical base name cannot be turned into a physical name."""

    def __init__(
        self,
        base_name: str,
        reason: str,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid base name error.

        Args:
            base_name: The rejected base name
            reason: Why the base name was rejected
            kind: Resource kind the name was requested for
            details: Additional context
        """
        details = details or {}
        details["base_name"] = base_name
        if kind:
            details["kind"] = kind
        super().__init__(f"Invalid base name {base_name!r}: {reason}", "base_name", details)
        self.base_name = base_name
        self.reason = reason


class UnresolvableNameError(ValidationError):
    """Raised when a physical name does not belong to the given config and kind."""

    def __init__(
        self,
        physical_name: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["physical_name"] = physical_name
        super().__init__(
            f"Cannot resolve {physical_name!r}: {reason}", "physical_name", details
        )
        self.physical_name = physical_name


class TagConflictError(ValidationError):
    """Raised when a caller tries to override the authoritative Environment tag."""

    def __init__(
        self,
        key: str,
        expected: str,
        actual: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        super().__init__(
            f"Tag {key!r} is managed by the naming config and cannot be set to {actual!r}",
            key,
            details,
        )


class PolicyError(AppreInfraError):
    """Base exception for access policy construction errors."""


class MissingConditionError(PolicyError):
    """Raised when an environment-sensitive statement would lack its tag condition."""

    def __init__(
        self,
        actions: list[str],
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize missing condition error.

        Args:
            actions: The environment-sensitive actions in the statement
            details: Additional context
        """
        details = details or {}
        details["actions"] = sorted(actions)
        super().__init__(
            "Environment-sensitive actions require an Environment tag condition",
            details,
        )
        self.actions = sorted(actions)


class ConfigMismatchError(AppreInfraError):
    """Raised when resources built from different naming configs are mixed."""

    def __init__(
        self,
        message: str,
        expected_environment: str,
        actual_environment: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["expected_environment"] = expected_environment
        if actual_environment is not None:
            details["actual_environment"] = actual_environment
        super().__init__(message, details)
