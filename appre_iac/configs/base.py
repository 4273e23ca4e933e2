"""
Base configuration dataclasses for deployment settings.

NamingConfig is the single value every naming, tagging and policy call is
threaded through. EnvironmentConfig wraps it with the remaining per-stack
settings loaded from Pulumi stack config and the process environment.
"""

import re
from dataclasses import dataclass

from appre_iac.configs.constants import PRODUCTION_ENVIRONMENTS
from appre_iac.core.exceptions import InvalidNamingConfigError

# Lowercase, hyphen-safe identifier usable inside any AWS resource name
APP_IDENTITY_PATTERN = re.compile(r"^[a-z][a-z0-9-]*[a-z0-9]$|^[a-z]$")

# Environment is the last name segment, so it may not contain the delimiter
ENVIRONMENT_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")


@dataclass(frozen=True)
class NamingConfig:
    """
    Application identity and target environment for one deployment run.

    Attributes:
        app_identity: Application identifier (e.g., 'appre')
        environment: Deployment environment token (e.g., 'test', 'prod')
    """
    app_identity: str
    environment: str

    def __post_init__(self) -> None:
        if not self.app_identity or not APP_IDENTITY_PATTERN.match(self.app_identity):
            raise InvalidNamingConfigError(
                f"Application identity {self.app_identity!r} must be a lowercase "
                "token of letters, digits and hyphens",
                field="app_identity",
            )
        if "--" in self.app_identity:
            raise InvalidNamingConfigError(
                f"Application identity {self.app_identity!r} contains an empty segment",
                field="app_identity",
            )
        if not self.environment or not ENVIRONMENT_PATTERN.match(self.environment):
            raise InvalidNamingConfigError(
                f"Environment {self.environment!r} must be a lowercase token of "
                "letters and digits without hyphens",
                field="environment",
            )

    @property
    def is_production(self) -> bool:
        """Check if this is a production environment."""
        return self.environment in PRODUCTION_ENVIRONMENTS


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Environment-specific configuration for infrastructure deployment.

    Attributes:
        naming: Naming config shared by every component of this run
        region: AWS region the stack deploys into
        account: AWS account id (optional, resolved from the caller if unset)
        lambda_memory: Lambda function memory in MB
        lambda_timeout: Lambda function timeout in seconds
        from_email: Verified SES sender address
        lambda_asset_dir: Directory holding built Lambda bootstrap bundles
    """
    naming: NamingConfig
    region: str
    account: str | None
    lambda_memory: int
    lambda_timeout: int
    from_email: str
    lambda_asset_dir: str

    @property
    def environment(self) -> str:
        """Get the deployment environment."""
        return self.naming.environment

    @property
    def app_name(self) -> str:
        """Get the application identity."""
        return self.naming.app_identity

    @property
    def is_production(self) -> bool:
        """Check if this is a production environment."""
        return self.naming.is_production
