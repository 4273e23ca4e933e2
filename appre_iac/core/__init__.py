"""
Core building blocks shared by the infrastructure package.

Provides the exception hierarchy and logging configuration.
"""

from appre_iac.core.exceptions import (
    AppreInfraError,
    ConfigMismatchError,
    InvalidBaseNameError,
    InvalidEnvironmentError,
    InvalidNamingConfigError,
    MissingConditionError,
    PolicyError,
    TagConflictError,
    UnresolvableNameError,
    ValidationError,
)
from appre_iac.core.logger import configure_logging

__all__ = [
    "AppreInfraError",
    "ConfigMismatchError",
    "InvalidBaseNameError",
    "InvalidEnvironmentError",
    "InvalidNamingConfigError",
    "MissingConditionError",
    "PolicyError",
    "TagConflictError",
    "UnresolvableNameError",
    "ValidationError",
    "configure_logging",
]
