"""
Utility functions for Pulumi infrastructure.

Provides naming conventions, tag factories, environment-scoped access
policies and lifecycle decisions.
"""

from appre_iac.utils.lifecycle import LifecycleDecision, decide
from appre_iac.utils.naming import (
    ResourceKind,
    ResourceNamer,
    extract_base_name,
    physical_name,
)
from appre_iac.utils.policies import (
    AccessPolicyBuilder,
    PolicyStatement,
    TagCondition,
    policy_document,
    scoped_policy,
)
from appre_iac.utils.tags import TagBuilder, TagSet, merge_tags, tags_for

__all__ = [
    "AccessPolicyBuilder",
    "LifecycleDecision",
    "PolicyStatement",
    "ResourceKind",
    "ResourceNamer",
    "TagBuilder",
    "TagCondition",
    "TagSet",
    "decide",
    "extract_base_name",
    "merge_tags",
    "physical_name",
    "policy_document",
    "scoped_policy",
    "tags_for",
]
