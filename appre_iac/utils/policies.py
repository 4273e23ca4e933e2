"""
Environment-scoped IAM policy statements.

Every statement granting an environment-sensitive action carries a
``StringEquals aws:ResourceTag/Environment`` condition bound to the caller's
own environment. The condition is enforced when the statement is
constructed: an unconditioned sensitive statement cannot exist.

Environment-sensitive actions:
- Data-plane reads and writes (DynamoDB items and PartiQL, S3 objects, SQS
  messages, SES templates and sends, Lambda invocation)
- User directory reads and administrative account operations

IAM action names are case-insensitive and so is the classification.

Only statements whose actions are all outside that set may be marked exempt,
and only explicitly.
"""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any

from appre_iac.configs.base import NamingConfig
from appre_iac.configs.constants import ENVIRONMENT_CONDITION_KEY
from appre_iac.core.exceptions import (
    ConfigMismatchError,
    MissingConditionError,
    TagConflictError,
)
from appre_iac.utils.naming import DELIMITER, ResourceKind, ResourceNamer

logger = logging.getLogger(__name__)

POLICY_VERSION = "2012-10-17"

ENVIRONMENT_SENSITIVE_ACTIONS: tuple[str, ...] = (
    # DynamoDB data plane
    "dynamodb:GetItem",
    "dynamodb:PutItem",
    "dynamodb:UpdateItem",
    "dynamodb:DeleteItem",
    "dynamodb:BatchGetItem",
    "dynamodb:BatchWriteItem",
    "dynamodb:Query",
    "dynamodb:Scan",
    "dynamodb:ConditionCheckItem",
    "dynamodb:PartiQL*",
    # S3 objects
    "s3:GetObject*",
    "s3:PutObject*",
    "s3:DeleteObject*",
    # SQS messages
    "sqs:SendMessage*",
    "sqs:ReceiveMessage",
    "sqs:DeleteMessage*",
    "sqs:ChangeMessageVisibility*",
    "sqs:GetQueueAttributes",
    "sqs:PurgeQueue",
    # SES templates and sending
    "ses:GetTemplate",
    "ses:CreateTemplate",
    "ses:UpdateTemplate",
    "ses:DeleteTemplate",
    "ses:Send*",
    # Lambda invocation
    "lambda:Invoke*",
    # User directory and administrative account operations
    "cognito-idp:ListUsers*",
    "cognito-idp:Admin*",
)

# Table grants for read-only and read/write roles
TABLE_READ_ACTIONS: frozenset[str] = frozenset({
    "dynamodb:BatchGetItem",
    "dynamodb:GetItem",
    "dynamodb:Query",
    "dynamodb:Scan",
    "dynamodb:ConditionCheckItem",
    "dynamodb:DescribeTable",
})
TABLE_READ_WRITE_ACTIONS: frozenset[str] = TABLE_READ_ACTIONS | {
    "dynamodb:BatchWriteItem",
    "dynamodb:PutItem",
    "dynamodb:UpdateItem",
    "dynamodb:DeleteItem",
}
QUEUE_CONSUME_ACTIONS: frozenset[str] = frozenset({
    "sqs:ReceiveMessage",
    "sqs:DeleteMessage",
    "sqs:GetQueueAttributes",
})


def _action_matches(action: str, pattern: str) -> bool:
    return fnmatchcase(action.lower(), pattern.lower())


def is_environment_sensitive(action: str) -> bool:
    """Check whether an IAM action reads or mutates environment-owned data."""
    return any(
        _action_matches(action, pattern) or _action_matches(pattern, action)
        for pattern in ENVIRONMENT_SENSITIVE_ACTIONS
    )


@dataclass(frozen=True)
class TagCondition:
    """
    Tag-equality predicate evaluated by the authorization engine.

    Attributes:
        environment: Required value of the target resource's Environment tag
        key: Condition key (aws:ResourceTag/Environment)
        operator: IAM condition operator
    """
    environment: str
    key: str = ENVIRONMENT_CONDITION_KEY
    operator: str = "StringEquals"

    @property
    def tag_key(self) -> str:
        """Get the resource tag key the condition inspects."""
        return self.key.split("/", 1)[1]

    def matches(self, tags: Mapping[str, str]) -> bool:
        """Evaluate the condition against a resource's tags."""
        return tags.get(self.tag_key) == self.environment

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {self.operator: {self.key: self.environment}}


@dataclass(frozen=True)
class PolicyStatement:
    """
    Permission statement handed to the provisioning engine.

    Constructing a statement with environment-sensitive actions and no
    condition raises MissingConditionError, exemption included.
    """
    actions: frozenset[str]
    resources: tuple[str, ...]
    condition: TagCondition | None
    extra_conditions: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    exempt: bool = False
    sid: str | None = None
    effect: str = "Allow"
    # Naming config the statement was built under; None for hand-built statements
    origin: NamingConfig | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.actions:
            raise ValueError("PolicyStatement requires at least one action")
        if not self.resources:
            raise ValueError("PolicyStatement requires at least one resource")
        if self.condition is None:
            sensitive = [a for a in self.actions if is_environment_sensitive(a)]
            if sensitive or not self.exempt:
                raise MissingConditionError(sensitive or list(self.actions))
        for clause in self.extra_conditions.values():
            if ENVIRONMENT_CONDITION_KEY in clause:
                raise TagConflictError(
                    ENVIRONMENT_CONDITION_KEY,
                    self.condition.environment if self.condition else "<none>",
                    str(clause[ENVIRONMENT_CONDITION_KEY]),
                )

    @property
    def environment(self) -> str | None:
        """Get the environment the statement is scoped to (None when exempt)."""
        return self.condition.environment if self.condition else None

    def allows(self, action: str, tags: Mapping[str, str]) -> bool:
        """
        Evaluate whether the statement grants an action on a tagged resource.

        Only the action list and the tag condition are evaluated; resource
        pattern matching and extra conditions belong to the platform.
        """
        if not any(_action_matches(action, pattern) for pattern in self.actions):
            return False
        return self.condition is None or self.condition.matches(tags)

    def to_dict(self) -> dict[str, Any]:
        """Render the statement as an IAM policy statement."""
        statement: dict[str, Any] = {
            "Effect": self.effect,
            "Action": sorted(self.actions),
            "Resource": list(self.resources),
        }
        if self.sid:
            statement["Sid"] = self.sid
        conditions: dict[str, dict[str, Any]] = {}
        if self.condition is not None:
            conditions.update(self.condition.to_dict())
        for operator, clause in self.extra_conditions.items():
            conditions.setdefault(operator, {}).update(clause)
        if conditions:
            statement["Condition"] = conditions
        return statement


def scoped_policy(
    actions: Iterable[str],
    resource_pattern: str | Iterable[str],
    cfg: NamingConfig,
    *,
    exempt: bool = False,
    sid: str | None = None,
    extra_conditions: Mapping[str, Mapping[str, Any]] | None = None,
) -> PolicyStatement:
    """
    Build a statement granting actions conditioned on the caller's environment.

    Args:
        actions: IAM action identifiers
        resource_pattern: ARN or ARN pattern (or several)
        cfg: Naming config of the caller
        exempt: Explicitly drop the Environment condition; only honoured for
            action sets with no environment-sensitive action
        sid: Optional statement id
        extra_conditions: Further condition clauses (e.g. ses:FromAddress)

    Returns:
        PolicyStatement carrying the Environment tag condition unless exempt

    Raises:
        MissingConditionError: If exemption is requested for sensitive actions
        TagConflictError: If extra_conditions touch the Environment tag key
    """
    action_set = frozenset(actions)
    resources = (resource_pattern,) if isinstance(resource_pattern, str) else tuple(resource_pattern)
    condition = None if exempt else TagCondition(environment=cfg.environment)
    statement = PolicyStatement(
        actions=action_set,
        resources=resources,
        condition=condition,
        extra_conditions=dict(extra_conditions or {}),
        exempt=exempt,
        sid=sid,
        origin=cfg,
    )
    if exempt:
        logger.info("Built exempt statement for actions %s", sorted(action_set))
    return statement


def policy_document(statements: Iterable[PolicyStatement]) -> dict[str, Any]:
    """Render statements as an IAM policy document."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [statement.to_dict() for statement in statements],
    }


_ARN_SEPARATORS = re.compile(r"[:/]")

# ARN formats by kind; identity stores are addressed by pool id, not name
_ARN_FORMATS: dict[ResourceKind, str] = {
    ResourceKind.TABLE: "arn:aws:dynamodb:{region}:{account}:table/{name}",
    ResourceKind.QUEUE: "arn:aws:sqs:{region}:{account}:{name}",
    ResourceKind.TEMPLATE: "arn:aws:ses:{region}:{account}:template/{name}",
    ResourceKind.IDENTITY_STORE: "arn:aws:cognito-idp:{region}:{account}:userpool/*",
    ResourceKind.FUNCTION: "arn:aws:lambda:{region}:{account}:function:{name}",
    ResourceKind.ROLE: "arn:aws:iam::{account}:role/{name}",
    ResourceKind.BUCKET: "arn:aws:s3:::{name}",
}


class AccessPolicyBuilder:
    """
    Builds environment-scoped statements for one naming config.

    Resource ARNs are derived through the ResourceNamer so statements and
    resources can never disagree on the environment suffix.
    """

    def __init__(self, config: NamingConfig, region: str, account: str) -> None:
        self.config = config
        self.namer = ResourceNamer(config)
        self.region = region
        self.account = account

    def resource_arn(self, kind: ResourceKind, base_name: str) -> str:
        """Get the ARN of a named resource in this config's environment."""
        return _ARN_FORMATS[kind].format(
            region=self.region,
            account=self.account,
            name=self.namer.name(kind, base_name),
        )

    def index_arn(self, table_base_name: str) -> str:
        """Get the ARN pattern covering all indexes of a table."""
        return f"{self.resource_arn(ResourceKind.TABLE, table_base_name)}/index/*"

    def scoped(
        self,
        actions: Iterable[str],
        resource_pattern: str | Iterable[str],
        *,
        sid: str | None = None,
        extra_conditions: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> PolicyStatement:
        """Build a statement conditioned on this config's environment."""
        resources = (resource_pattern,) if isinstance(resource_pattern, str) else tuple(resource_pattern)
        for resource in resources:
            self._check_resource(resource)
        return scoped_policy(
            actions, resources, self.config, sid=sid, extra_conditions=extra_conditions
        )

    def exempt(
        self,
        actions: Iterable[str],
        resource_pattern: str | Iterable[str],
        *,
        sid: str | None = None,
    ) -> PolicyStatement:
        """Build an explicitly exempt statement for environment-agnostic actions."""
        return scoped_policy(actions, resource_pattern, self.config, exempt=True, sid=sid)

    def for_resources(
        self,
        actions: Iterable[str],
        kind: ResourceKind,
        base_names: Iterable[str],
        *,
        sid: str | None = None,
        include_indexes: bool = False,
        extra_conditions: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> PolicyStatement:
        """
        Build a statement covering named resources of one kind.

        Args:
            actions: IAM action identifiers
            kind: Kind of every named resource
            base_names: Logical names of the resources
            sid: Optional statement id
            include_indexes: Also cover table index ARNs
            extra_conditions: Further condition clauses

        Returns:
            Environment-scoped PolicyStatement
        """
        resources: list[str] = []
        for base_name in base_names:
            resources.append(self.resource_arn(kind, base_name))
            if include_indexes and kind is ResourceKind.TABLE:
                resources.append(self.index_arn(base_name))
        # Identity store ARNs collapse to one wildcard pattern
        resources = list(dict.fromkeys(resources))
        return self.scoped(actions, resources, sid=sid, extra_conditions=extra_conditions)

    def _check_resource(self, resource: str) -> None:
        """Reject ARNs naming a resource of this app in another environment."""
        for name in _ARN_SEPARATORS.split(resource):
            if "*" in name:
                continue
            for kind in ResourceKind:
                prefix = f"{self.config.app_identity}{DELIMITER}{kind.namespace}{DELIMITER}"
                if name.startswith(prefix) and not self.namer.owns(name, kind):
                    raise ConfigMismatchError(
                        f"Resource {resource!r} does not belong to environment "
                        f"{self.config.environment!r}",
                        expected_environment=self.config.environment,
                        actual_environment=name.rsplit(DELIMITER, 1)[-1],
                        details={"resource": resource, "kind": kind.name},
                    )


def render_policy(statements: Iterable[PolicyStatement]) -> str:
    """Render statements as an IAM policy JSON string."""
    return json.dumps(policy_document(statements))
