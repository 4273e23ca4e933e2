"""
Configuration module for Pulumi infrastructure.

Provides type-safe configuration loading from the process environment and
Pulumi stack config files.
"""

from appre_iac.configs.base import EnvironmentConfig, NamingConfig
from appre_iac.configs.constants import (
    DEFAULT_TAGS,
    PRODUCTION_ENVIRONMENTS,
    SERVICE_DOMAINS,
    VALID_ENVIRONMENTS,
)
from appre_iac.configs.settings import NamingSettings, get_settings

__all__ = [
    "EnvironmentConfig",
    "NamingConfig",
    "NamingSettings",
    "get_settings",
    "DEFAULT_TAGS",
    "PRODUCTION_ENVIRONMENTS",
    "SERVICE_DOMAINS",
    "VALID_ENVIRONMENTS",
]
