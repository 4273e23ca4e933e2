"""
Process-environment settings for deployment definitions.

Reads APP_NAME, ENVIRONMENT and the AWS target from environment variables
and an optional .env file.

Dependencies: pydantic_settings
System role: Foundation for EnvironmentConfig and runtime name resolution
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from appre_iac.configs.constants import VALID_ENVIRONMENTS


class NamingSettings(BaseSettings):
    """Naming and deployment-target settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str | None = Field(
        default=None,
        description="Application identity embedded in every resource name",
    )
    environment: str | None = Field(
        default=None,
        description="Deployment environment (dev, test, staging, prod)",
    )
    aws_region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("aws_region", "aws_default_region"),
        description="AWS region to deploy into",
    )
    aws_account_id: str | None = Field(
        default=None,
        description="AWS account id (resolved from the caller identity if unset)",
    )
    allowed_environments: str = Field(
        default=",".join(VALID_ENVIRONMENTS),
        description="Comma-separated allow-list of environment tokens",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @property
    def allowed_environment_list(self) -> tuple[str, ...]:
        """Get the allow-list as a tuple of stripped tokens."""
        return tuple(
            token.strip() for token in self.allowed_environments.split(",") if token.strip()
        )


@lru_cache
def get_settings() -> NamingSettings:
    """
    Get naming settings singleton.

    Environment variables are read once per process.

    Returns:
        NamingSettings: Settings instance
    """
    return NamingSettings()
