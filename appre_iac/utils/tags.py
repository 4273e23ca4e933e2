"""
Tag factory for AWS resources.

Provides consistent tagging for cost allocation and environment isolation.
The Environment tag is authoritative: it always equals the naming config's
environment and access policies are conditioned on it.
"""

from collections.abc import Iterator, Mapping

from appre_iac.configs.base import NamingConfig
from appre_iac.configs.constants import DEFAULT_TAGS, ENVIRONMENT_TAG_KEY
from appre_iac.core.exceptions import TagConflictError


class TagSet(Mapping[str, str]):
    """Immutable mapping of tag keys to values, always carrying Environment."""

    __slots__ = ("_tags",)

    def __init__(self, tags: Mapping[str, str]) -> None:
        if ENVIRONMENT_TAG_KEY not in tags:
            raise TagConflictError(ENVIRONMENT_TAG_KEY, "<environment>", "<missing>")
        self._tags = dict(tags)

    def __getitem__(self, key: str) -> str:
        return self._tags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __hash__(self) -> int:
        return hash(frozenset(self._tags.items()))

    def __repr__(self) -> str:
        return f"TagSet({self._tags!r})"

    @property
    def environment(self) -> str:
        """Get the authoritative Environment tag value."""
        return self._tags[ENVIRONMENT_TAG_KEY]

    def as_dict(self) -> dict[str, str]:
        """Get a plain dict copy for provider resource arguments."""
        return dict(self._tags)


def _check_environment(cfg: NamingConfig, tags: Mapping[str, str]) -> None:
    value = tags.get(ENVIRONMENT_TAG_KEY)
    if value is not None and value != cfg.environment:
        raise TagConflictError(ENVIRONMENT_TAG_KEY, cfg.environment, value)


def tags_for(cfg: NamingConfig, extra: Mapping[str, str] | None = None) -> TagSet:
    """
    Create the standard tag set for a resource.

    Args:
        cfg: Naming config of the current deployment
        extra: Additional tags to include

    Returns:
        TagSet with Application, ManagedBy, Environment and the extra tags

    Raises:
        TagConflictError: If extra sets Environment to another environment
    """
    extra = extra or {}
    _check_environment(cfg, extra)
    return TagSet({
        **DEFAULT_TAGS,
        "Application": cfg.app_identity,
        **extra,
        ENVIRONMENT_TAG_KEY: cfg.environment,
    })


def merge_tags(
    base_tags: TagSet,
    *additional_tags: Mapping[str, str],
) -> TagSet:
    """
    Merge tag mappings into a tag set.

    Later mappings win, except for Environment which must not change.

    Args:
        base_tags: Base tag set
        *additional_tags: Additional tag mappings to merge

    Returns:
        Merged tag set
    """
    result = base_tags.as_dict()
    for tags in additional_tags:
        value = tags.get(ENVIRONMENT_TAG_KEY)
        if value is not None and value != base_tags.environment:
            raise TagConflictError(ENVIRONMENT_TAG_KEY, base_tags.environment, value)
        result.update(tags)
    return TagSet(result)


class TagBuilder:
    """Builds consistent tags for the resources of one service domain."""

    def __init__(self, config: NamingConfig, domain: str) -> None:
        self.config = config
        self.domain = domain

    def base_tags(self, **extra: str) -> TagSet:
        """Get base tags for this service."""
        return tags_for(self.config, {"Domain": self.domain, **extra})

    def component_tags(self, component: str, **extra: str) -> TagSet:
        """Get tags for a specific component within the service."""
        return self.base_tags(Component=component, **extra)

    def table_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("dynamodb", Table=base_name, **extra)

    def queue_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("sqs", Queue=base_name, **extra)

    def template_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("ses", Template=base_name, **extra)

    def identity_store_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("cognito", UserPool=base_name, **extra)

    def function_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("lambda", Function=base_name, **extra)

    def role_tags(self, base_name: str, **extra: str) -> TagSet:
        return self.component_tags("iam", Role=base_name, **extra)
