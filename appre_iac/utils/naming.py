"""
Resource naming conventions for consistent AWS resource names.

Follows pattern: {app}-{kind namespace}-{base name}-{environment}

The environment is always the last segment, so every resource of one
environment shares the suffix ``-{environment}``. Base names never contain
the ``-`` delimiter, which keeps the mapping reversible.
"""

import re
from dataclasses import dataclass
from enum import Enum

from appre_iac.configs.base import NamingConfig
from appre_iac.core.exceptions import InvalidBaseNameError, UnresolvableNameError

DELIMITER = "-"

# Word separator for multi-word base names (e.g., 'auth_otps')
_WORD_CHARS = re.compile(r"^[a-z][a-z0-9_]*$")
# S3 bucket names reject underscores
_BUCKET_CHARS = re.compile(r"^[a-z][a-z0-9]*$")


class ResourceKind(Enum):
    """
    Category of physical resource.

    Each kind carries its namespace segment, the base-name character class
    and the provider's maximum physical-name length.
    """

    TABLE = ("table", _WORD_CHARS, 255)
    QUEUE = ("queue", _WORD_CHARS, 80)
    TEMPLATE = ("template", _WORD_CHARS, 64)
    IDENTITY_STORE = ("identity", _WORD_CHARS, 128)
    FUNCTION = ("function", _WORD_CHARS, 64)
    ROLE = ("role", _WORD_CHARS, 64)
    BUCKET = ("bucket", _BUCKET_CHARS, 63)

    def __init__(self, namespace: str, pattern: re.Pattern[str], max_length: int) -> None:
        self.namespace = namespace
        self.pattern = pattern
        self.max_length = max_length


def environment_suffix(cfg: NamingConfig) -> str:
    """Get the suffix shared by every physical name of the config's environment."""
    return f"{DELIMITER}{cfg.environment}"


def _prefix(cfg: NamingConfig, kind: ResourceKind) -> str:
    return f"{cfg.app_identity}{DELIMITER}{kind.namespace}{DELIMITER}"


def validate_base_name(kind: ResourceKind, base_name: str) -> None:
    """
    Validate a base name for a resource kind.

    Args:
        kind: Resource kind the name is requested for
        base_name: Caller-supplied logical identifier

    Raises:
        InvalidBaseNameError: If the base name is empty, contains the
            delimiter or falls outside the kind's character class
    """
    if not base_name:
        raise InvalidBaseNameError(base_name, "Name cannot be empty", kind.name)

    # Check the delimiter first for a helpful message
    if DELIMITER in base_name:
        raise InvalidBaseNameError(
            base_name,
            f"Contains the {DELIMITER!r} delimiter. Environment suffixes are applied "
            "by the namer; use '_' between words (e.g., 'auth_otps')",
            kind.name,
        )

    if not kind.pattern.match(base_name):
        allowed = "a-z, 0-9" if kind is ResourceKind.BUCKET else "a-z, 0-9 and '_'"
        raise InvalidBaseNameError(
            base_name,
            f"Must start with a lowercase letter and contain only {allowed}",
            kind.name,
        )


def physical_name(cfg: NamingConfig, kind: ResourceKind, base_name: str) -> str:
    """
    Generate the physical name of a resource.

    Args:
        cfg: Naming config of the current deployment
        kind: Resource kind
        base_name: Environment-agnostic logical identifier (e.g., 'otp')

    Returns:
        Physical name, e.g. 'appre-template-otp-test'

    Raises:
        InvalidBaseNameError: If the base name is invalid for the kind or the
            resulting name exceeds the kind's length limit
    """
    validate_base_name(kind, base_name)
    name = f"{_prefix(cfg, kind)}{base_name}{environment_suffix(cfg)}"
    if len(name) > kind.max_length:
        raise InvalidBaseNameError(
            base_name,
            f"Physical name {name!r} exceeds the {kind.max_length} character limit",
            kind.name,
        )
    return name


def extract_base_name(physical: str, cfg: NamingConfig, kind: ResourceKind) -> str:
    """
    Recover the base name from a physical name.

    Args:
        physical: Physical resource name
        cfg: Naming config the name is expected to belong to
        kind: Resource kind the name is expected to belong to

    Returns:
        The base name the physical name was generated from

    Raises:
        UnresolvableNameError: If the app, kind or environment segment does
            not match, or the remaining segment is not a valid base name
    """
    prefix = _prefix(cfg, kind)
    suffix = environment_suffix(cfg)

    if not physical.endswith(suffix):
        raise UnresolvableNameError(
            physical,
            f"environment segment does not match {cfg.environment!r}",
            {"environment": cfg.environment},
        )
    if not physical.startswith(prefix):
        raise UnresolvableNameError(
            physical,
            f"expected prefix {prefix!r} for kind {kind.name}",
            {"app_identity": cfg.app_identity, "kind": kind.name},
        )

    base_name = physical[len(prefix):len(physical) - len(suffix)]
    try:
        validate_base_name(kind, base_name)
    except InvalidBaseNameError as exc:
        raise UnresolvableNameError(physical, exc.reason, {"kind": kind.name}) from exc
    return base_name


@dataclass(frozen=True)
class ResourceNamer:
    """
    Generates consistent resource names for one naming config.

    Attributes:
        config: Naming config shared by the whole deployment run
    """
    config: NamingConfig

    @property
    def environment(self) -> str:
        """Get the environment names are suffixed with."""
        return self.config.environment

    def name(self, kind: ResourceKind, base_name: str) -> str:
        """Generate the physical name for a base name of the given kind."""
        return physical_name(self.config, kind, base_name)

    def resolve(self, physical: str, kind: ResourceKind) -> str:
        """Recover the base name of a physical name produced by this namer."""
        return extract_base_name(physical, self.config, kind)

    def owns(self, physical: str, kind: ResourceKind) -> bool:
        """Check whether a physical name belongs to this namer's config."""
        try:
            self.resolve(physical, kind)
        except UnresolvableNameError:
            return False
        return True

    def table(self, base_name: str) -> str:
        """Generate a DynamoDB table name."""
        return self.name(ResourceKind.TABLE, base_name)

    def queue(self, base_name: str) -> str:
        """Generate an SQS queue name."""
        return self.name(ResourceKind.QUEUE, base_name)

    def template(self, base_name: str) -> str:
        """Generate an SES template name."""
        return self.name(ResourceKind.TEMPLATE, base_name)

    def identity_store(self, base_name: str) -> str:
        """Generate a Cognito user pool name."""
        return self.name(ResourceKind.IDENTITY_STORE, base_name)

    def function(self, base_name: str) -> str:
        """Generate a Lambda function name."""
        return self.name(ResourceKind.FUNCTION, base_name)

    def role(self, base_name: str) -> str:
        """Generate an IAM role name."""
        return self.name(ResourceKind.ROLE, base_name)

    def bucket(self, base_name: str) -> str:
        """
        Generate an S3 bucket name.

        Bucket names share a global namespace, so the app identity must be
        distinctive enough on its own.
        """
        return self.name(ResourceKind.BUCKET, base_name)

    def log_group(self, function_base_name: str) -> str:
        """Generate the CloudWatch log group name for a Lambda function."""
        return f"/aws/lambda/{self.function(function_base_name)}"
