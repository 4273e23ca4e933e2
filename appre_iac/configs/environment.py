"""
Environment configuration loader.

Merges Pulumi stack config over process settings and validates the result.
"""

import logging
from collections.abc import Mapping
from typing import Any

import pulumi

from appre_iac.configs.base import EnvironmentConfig, NamingConfig
from appre_iac.configs.constants import (
    DEFAULT_FROM_EMAIL,
    LAMBDA_DEFAULTS,
)
from appre_iac.configs.settings import NamingSettings, get_settings
from appre_iac.core.exceptions import InvalidEnvironmentError, InvalidNamingConfigError

logger = logging.getLogger(__name__)

# Stack config keys that may override process settings
OVERRIDE_KEYS = (
    "app_name",
    "environment",
    "region",
    "account",
    "lambda_memory",
    "lambda_timeout",
    "from_email",
    "lambda_asset_dir",
)


def load_environment_config(
    settings: NamingSettings,
    overrides: Mapping[str, Any] | None = None,
) -> EnvironmentConfig:
    """
    Build a validated EnvironmentConfig.

    Stack config overrides win over environment variables.

    Args:
        settings: Settings read from the process environment
        overrides: Values from the Pulumi stack config (None entries ignored)

    Returns:
        EnvironmentConfig: Validated configuration object

    Raises:
        InvalidNamingConfigError: If APP_NAME, ENVIRONMENT or the region is missing
        InvalidEnvironmentError: If the environment is not on the allow-list
    """
    values = {key: value for key, value in (overrides or {}).items() if value is not None}

    app_name = values.get("app_name") or settings.app_name
    environment = values.get("environment") or settings.environment
    region = values.get("region") or settings.aws_region

    if not app_name:
        raise InvalidNamingConfigError("APP_NAME environment variable is required", field="app_name")
    if not environment:
        raise InvalidNamingConfigError(
            "ENVIRONMENT environment variable is required", field="environment"
        )
    if not region:
        raise InvalidNamingConfigError(
            "AWS_REGION or AWS_DEFAULT_REGION environment variable is required",
            field="region",
        )

    allowed = settings.allowed_environment_list
    if environment not in allowed:
        raise InvalidEnvironmentError(environment, allowed)

    config = EnvironmentConfig(
        naming=NamingConfig(app_identity=app_name, environment=environment),
        region=region,
        account=values.get("account") or settings.aws_account_id,
        lambda_memory=int(values.get("lambda_memory") or LAMBDA_DEFAULTS["memory_mb"]),
        lambda_timeout=int(values.get("lambda_timeout") or LAMBDA_DEFAULTS["timeout_seconds"]),
        from_email=values.get("from_email") or DEFAULT_FROM_EMAIL,
        lambda_asset_dir=values.get("lambda_asset_dir") or "target/lambda",
    )
    logger.info(
        "Loaded config app=%s environment=%s region=%s",
        config.app_name,
        config.environment,
        config.region,
    )
    return config


def get_config() -> EnvironmentConfig:
    """
    Load environment configuration from Pulumi stack config and the environment.

    Returns:
        EnvironmentConfig: Validated configuration object
    """
    config = pulumi.Config()
    overrides = {key: config.get(key) for key in OVERRIDE_KEYS}
    return load_environment_config(get_settings(), overrides)
