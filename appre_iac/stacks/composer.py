"""
Stack composition for environment-scoped deployments.

StackComposer assembles groups of like resources (tables, queues, templates,
identity stores, functions, roles) for one naming config. Every resource
gets its physical name from the ResourceNamer, its tags from the TagBuilder
and its durability settings from the lifecycle policy; every role grant is
built by the AccessPolicyBuilder. The resulting DeploymentPlan is plain data:
Pulumi components turn it into resources.

Dependencies: appre_iac.utils
System role: Boundary between the naming/policy core and the provisioning engine
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from appre_iac.configs.base import NamingConfig
from appre_iac.configs.constants import LAMBDA_DEFAULTS, SQS_DEFAULTS
from appre_iac.core.exceptions import ConfigMismatchError, ValidationError
from appre_iac.utils.lifecycle import LifecycleDecision, decide
from appre_iac.utils.naming import ResourceKind, ResourceNamer
from appre_iac.utils.policies import AccessPolicyBuilder, PolicyStatement
from appre_iac.utils.tags import TagBuilder, TagSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableKey:
    """DynamoDB key attribute ('S' string, 'N' number)."""
    name: str
    type: str = "S"


@dataclass(frozen=True)
class TableIndex:
    """DynamoDB global secondary index."""
    name: str
    partition_key: TableKey
    sort_key: TableKey | None = None
    projection: str = "ALL"


@dataclass(frozen=True)
class ResourceSpec:
    """
    Fully-specified, ready-to-provision resource.

    Attributes:
        kind: Resource kind
        base_name: Environment-agnostic logical name
        physical_name: Name derived by the ResourceNamer
        tags: Tag set carrying the Environment tag
        lifecycle: Retention and durability decision
        properties: Kind-specific settings consumed by the Pulumi components
    """
    kind: ResourceKind
    base_name: str
    physical_name: str
    tags: TagSet
    lifecycle: LifecycleDecision
    properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def environment(self) -> str:
        return self.tags.environment


@dataclass(frozen=True)
class RoleGrant:
    """Role together with the statements attached to it."""
    role: ResourceSpec
    statements: tuple[PolicyStatement, ...]


@dataclass(frozen=True)
class ResourceGroup:
    """Named group of like resources (e.g. 'tables', 'templates')."""
    name: str
    resources: tuple[ResourceSpec, ...]

    def __iter__(self) -> Iterator[ResourceSpec]:
        return iter(self.resources)

    def of_kind(self, kind: ResourceKind) -> tuple[ResourceSpec, ...]:
        return tuple(spec for spec in self.resources if spec.kind is kind)

    def get(self, base_name: str) -> ResourceSpec:
        for spec in self.resources:
            if spec.base_name == base_name:
                return spec
        raise KeyError(f"{base_name!r} not in group {self.name!r}")


@dataclass(frozen=True)
class DeploymentPlan:
    """Internally-consistent resource graph for one environment."""
    config: NamingConfig
    domain: str
    groups: tuple[ResourceGroup, ...]
    grants: tuple[RoleGrant, ...]

    def group(self, name: str) -> ResourceGroup:
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(f"No resource group named {name!r}")

    def resources(self, kind: ResourceKind | None = None) -> Iterator[ResourceSpec]:
        for group in self.groups:
            for spec in group:
                if kind is None or spec.kind is kind:
                    yield spec
        for grant in self.grants:
            if kind is None or kind is ResourceKind.ROLE:
                yield grant.role

    def grant_for(self, role_base_name: str) -> RoleGrant:
        for grant in self.grants:
            if grant.role.base_name == role_base_name:
                return grant
        raise KeyError(f"No grant for role {role_base_name!r}")


class StackComposer:
    """
    Assembles the resource groups of one service for one naming config.

    Mixing specs or statements built from another NamingConfig is rejected
    with ConfigMismatchError, both when they are added and again in plan().
    """

    def __init__(
        self,
        config: NamingConfig,
        domain: str,
        region: str,
        account: str,
    ) -> None:
        self.config = config
        self.domain = domain
        self.namer = ResourceNamer(config)
        self.tags = TagBuilder(config, domain)
        self.policies = AccessPolicyBuilder(config, region, account)
        self.lifecycle = decide(config)
        self._groups: dict[str, list[ResourceSpec]] = {}
        self._roles: dict[str, ResourceSpec] = {}
        self._statements: dict[str, list[PolicyStatement]] = {}

    # --- Resource definitions ---

    def _spec(
        self,
        kind: ResourceKind,
        base_name: str,
        tags: TagSet,
        properties: Mapping[str, Any],
        lifecycle: LifecycleDecision | None = None,
    ) -> ResourceSpec:
        return ResourceSpec(
            kind=kind,
            base_name=base_name,
            physical_name=self.namer.name(kind, base_name),
            tags=tags,
            lifecycle=lifecycle or self.lifecycle,
            properties=dict(properties),
        )

    def table(
        self,
        base_name: str,
        *,
        partition_key: TableKey,
        sort_key: TableKey | None = None,
        ttl_attribute: str | None = None,
        indexes: Iterable[TableIndex] = (),
        point_in_time_recovery: bool = True,
    ) -> ResourceSpec:
        """
        Define a DynamoDB table.

        Args:
            base_name: Logical table name (e.g., 'auth_otps')
            partition_key: Hash key attribute
            sort_key: Optional range key attribute
            ttl_attribute: Attribute holding the expiry timestamp
            indexes: Global secondary indexes
            point_in_time_recovery: Set False to opt out of PITR even in
                production (it is never enabled outside production)

        Returns:
            ResourceSpec for the table
        """
        lifecycle = self.lifecycle
        if not point_in_time_recovery:
            lifecycle = replace(lifecycle, point_in_time_recovery_enabled=False)
        return self._spec(
            ResourceKind.TABLE,
            base_name,
            self.tags.table_tags(base_name),
            {
                "partition_key": partition_key,
                "sort_key": sort_key,
                "ttl_attribute": ttl_attribute,
                "indexes": tuple(indexes),
            },
            lifecycle,
        )

    def queue(
        self,
        base_name: str,
        *,
        visibility_timeout_seconds: int = SQS_DEFAULTS["visibility_timeout_seconds"],
        retention_seconds: int | None = None,
        dead_letter: str | None = None,
        max_receive_count: int = SQS_DEFAULTS["max_receive_count"],
    ) -> ResourceSpec:
        """Define an SQS queue, optionally redriving to a dead letter queue."""
        return self._spec(
            ResourceKind.QUEUE,
            base_name,
            self.tags.queue_tags(base_name),
            {
                "visibility_timeout_seconds": visibility_timeout_seconds,
                "retention_seconds": retention_seconds,
                "dead_letter": self.namer.queue(dead_letter) if dead_letter else None,
                "max_receive_count": max_receive_count,
            },
        )

    def template(self, base_name: str, *, subject: str, html: str, text: str) -> ResourceSpec:
        """Define an SES email template."""
        return self._spec(
            ResourceKind.TEMPLATE,
            base_name,
            self.tags.template_tags(base_name),
            {"subject": subject, "html": html, "text": text},
        )

    def identity_store(
        self,
        base_name: str,
        *,
        triggers: Mapping[str, str] | None = None,
    ) -> ResourceSpec:
        """
        Define a Cognito user pool.

        Args:
            base_name: Logical pool name
            triggers: Lambda trigger name (e.g. 'create_auth_challenge') to
                function base name
        """
        return self._spec(
            ResourceKind.IDENTITY_STORE,
            base_name,
            self.tags.identity_store_tags(base_name),
            {
                "triggers": {
                    trigger: self.namer.function(function)
                    for trigger, function in (triggers or {}).items()
                },
            },
        )

    def function(
        self,
        base_name: str,
        *,
        role: str,
        asset: str,
        memory_mb: int = LAMBDA_DEFAULTS["memory_mb"],
        timeout_seconds: int = LAMBDA_DEFAULTS["timeout_seconds"],
        environment: Mapping[str, str] | None = None,
        queue_source: str | None = None,
    ) -> ResourceSpec:
        """
        Define a Lambda function.

        APP_NAME and ENVIRONMENT are always injected so the function can
        resolve base names at runtime.
        """
        variables = {
            **(environment or {}),
            "APP_NAME": self.config.app_identity,
            "ENVIRONMENT": self.config.environment,
        }
        return self._spec(
            ResourceKind.FUNCTION,
            base_name,
            self.tags.function_tags(base_name),
            {
                "role": self.namer.role(role),
                "asset": asset,
                "memory_mb": memory_mb,
                "timeout_seconds": timeout_seconds,
                "environment": variables,
                "queue_source": self.namer.queue(queue_source) if queue_source else None,
                "log_group": self.namer.log_group(base_name),
            },
        )

    def role(
        self,
        base_name: str,
        *,
        service: str = "lambda.amazonaws.com",
        managed_policy_arns: Iterable[str] = (
            "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole",
        ),
    ) -> ResourceSpec:
        """Define an IAM role that statements can be granted to."""
        if base_name in self._roles:
            raise ValidationError(f"Role {base_name!r} is already defined", field="base_name")
        spec = self._spec(
            ResourceKind.ROLE,
            base_name,
            self.tags.role_tags(base_name),
            {"service": service, "managed_policy_arns": tuple(managed_policy_arns)},
        )
        self._roles[base_name] = spec
        self._statements.setdefault(base_name, [])
        return spec

    # --- Assembly ---

    def add(self, group: str, spec: ResourceSpec) -> ResourceSpec:
        """Add a resource to a group after checking it belongs to this config."""
        self._check_spec(spec)
        members = self._groups.setdefault(group, [])
        if any(
            existing.kind is spec.kind and existing.base_name == spec.base_name
            for existing in members
        ):
            raise ValidationError(
                f"{spec.kind.name} {spec.base_name!r} is already defined in group {group!r}",
                field="base_name",
            )
        members.append(spec)
        return spec

    def group(self, name: str, *specs: ResourceSpec) -> ResourceGroup:
        """Add resources to a named group and return the group so far."""
        for spec in specs:
            self.add(name, spec)
        return ResourceGroup(name=name, resources=tuple(self._groups.get(name, ())))

    def grant(
        self,
        role: str,
        actions: Iterable[str],
        kind: ResourceKind,
        base_names: Iterable[str],
        *,
        sid: str | None = None,
        include_indexes: bool = False,
        extra_conditions: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> PolicyStatement:
        """
        Grant actions on named resources to a role, scoped to this environment.

        Returns:
            The attached PolicyStatement
        """
        statement = self.policies.for_resources(
            actions,
            kind,
            base_names,
            sid=sid,
            include_indexes=include_indexes,
            extra_conditions=extra_conditions,
        )
        return self.attach(role, statement)

    def attach(self, role: str, statement: PolicyStatement) -> PolicyStatement:
        """Attach a pre-built statement to a role."""
        if role not in self._roles:
            raise ValidationError(f"Role {role!r} is not defined", field="role")
        self._check_statement(statement)
        self._statements[role].append(statement)
        return statement

    def plan(self) -> DeploymentPlan:
        """
        Produce the deployment plan.

        Raises:
            ConfigMismatchError: If any resource or statement belongs to
                another naming config
        """
        groups = tuple(
            ResourceGroup(name=name, resources=tuple(specs))
            for name, specs in self._groups.items()
        )
        grants = tuple(
            RoleGrant(role=spec, statements=tuple(self._statements[name]))
            for name, spec in self._roles.items()
        )
        for group in groups:
            for spec in group:
                self._check_spec(spec)
        for grant in grants:
            self._check_spec(grant.role)
            for statement in grant.statements:
                self._check_statement(statement)

        logger.info(
            "Composed %s plan for %s: %d resources, %d roles",
            self.domain,
            self.config.environment,
            sum(len(group.resources) for group in groups),
            len(grants),
        )
        return DeploymentPlan(
            config=self.config,
            domain=self.domain,
            groups=groups,
            grants=grants,
        )

    # --- Consistency checks ---

    def _check_spec(self, spec: ResourceSpec) -> None:
        if spec.tags.environment != self.config.environment:
            raise ConfigMismatchError(
                f"{spec.kind.name} {spec.base_name!r} is tagged for another environment",
                expected_environment=self.config.environment,
                actual_environment=spec.tags.environment,
            )
        if (
            not self.namer.owns(spec.physical_name, spec.kind)
            or self.namer.resolve(spec.physical_name, spec.kind) != spec.base_name
        ):
            raise ConfigMismatchError(
                f"{spec.physical_name!r} was not named under this config",
                expected_environment=self.config.environment,
                details={"physical_name": spec.physical_name},
            )

    def _check_statement(self, statement: PolicyStatement) -> None:
        if statement.origin is not None and statement.origin != self.config:
            raise ConfigMismatchError(
                f"Policy statement was built for {statement.origin.app_identity!r} "
                f"in {statement.origin.environment!r}",
                expected_environment=self.config.environment,
                actual_environment=statement.origin.environment,
                details={
                    "expected_app_identity": self.config.app_identity,
                    "actual_app_identity": statement.origin.app_identity,
                },
            )
        if statement.exempt and statement.condition is None:
            return
        if statement.environment != self.config.environment:
            raise ConfigMismatchError(
                "Policy statement is scoped to another environment",
                expected_environment=self.config.environment,
                actual_environment=statement.environment,
                details={"actions": sorted(statement.actions)},
            )
