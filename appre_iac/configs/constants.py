"""
Infrastructure constants for the Appre platform.

Contains environment classifications, default tags and per-service defaults.
"""

from typing import Final

# Default application identity when APP_NAME is not set
DEFAULT_APP_NAME: Final[str] = "appre"

# Environments accepted by the configuration loader
VALID_ENVIRONMENTS: Final[tuple[str, ...]] = ("dev", "test", "staging", "prod")

# Environment tokens that receive production data-retention guarantees
PRODUCTION_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"prod", "production"})

# Every environment token the lifecycle policy knows how to classify
KNOWN_ENVIRONMENTS: Final[frozenset[str]] = frozenset(
    {"dev", "development", "test", "staging"} | PRODUCTION_ENVIRONMENTS
)

# Tag key that carries the environment and gates access policies
ENVIRONMENT_TAG_KEY: Final[str] = "Environment"

# Condition key evaluated by IAM against the target resource's tags
ENVIRONMENT_CONDITION_KEY: Final[str] = f"aws:ResourceTag/{ENVIRONMENT_TAG_KEY}"

# Default tags applied to all resources (Application is added per config)
DEFAULT_TAGS: Final[dict[str, str]] = {
    "ManagedBy": "pulumi",
}

# Service domains used in the Domain tag
SERVICE_DOMAINS: Final[dict[str, str]] = {
    "authentication": "auth",
    "notifications": "notifications",
    "user_management": "user-management",
    "payments": "payments",
    "shared": "shared",
}

# SQS configuration
SQS_DEFAULTS: Final[dict[str, int]] = {
    "visibility_timeout_seconds": 300,
    "message_retention_seconds": 345600,  # 4 days
    "dlq_retention_seconds": 1209600,  # 14 days
    "max_receive_count": 3,  # Retries before DLQ
    "batch_size": 10,
}

# Lambda configuration
LAMBDA_DEFAULTS: Final[dict[str, int]] = {
    "memory_mb": 256,
    "timeout_seconds": 30,
    "log_retention_days": 30,
}

LAMBDA_RUNTIME: Final[str] = "provided.al2023"
LAMBDA_HANDLER: Final[str] = "bootstrap"

# Cognito token validity
TOKEN_VALIDITY: Final[dict[str, int]] = {
    "access_token_hours": 1,
    "id_token_hours": 1,
    "refresh_token_days": 30,
}

DEFAULT_FROM_EMAIL: Final[str] = "noreply@appreciata.com"
