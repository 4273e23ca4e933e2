"""
Per-service deployment plans.

Each compose_* function returns a DeploymentPlan built through a
StackComposer for one environment.
"""

from appre_iac.stacks.authentication import compose_authentication
from appre_iac.stacks.composer import (
    DeploymentPlan,
    ResourceGroup,
    ResourceSpec,
    RoleGrant,
    StackComposer,
    TableIndex,
    TableKey,
)
from appre_iac.stacks.notifications import compose_notifications

__all__ = [
    "DeploymentPlan",
    "ResourceGroup",
    "ResourceSpec",
    "RoleGrant",
    "StackComposer",
    "TableIndex",
    "TableKey",
    "compose_authentication",
    "compose_notifications",
]
