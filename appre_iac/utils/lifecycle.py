"""
Retention and durability decisions per environment.

Production resources are retained on stack deletion and keep point-in-time
recovery and deletion protection. Every other environment, including any
unrecognized environment token, gets the destructive branch so test stacks
tear down cleanly.

IMPORTANT: a misspelled production token (e.g. 'prdo') is classified as
non-production and its data is NOT retained. Validate the environment
against the allow-list (see configs.environment.load_environment_config)
before calling decide().
"""

import logging
from dataclasses import dataclass
from typing import Any

import pulumi

from appre_iac.configs.base import NamingConfig
from appre_iac.configs.constants import KNOWN_ENVIRONMENTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LifecycleDecision:
    """
    Durability posture of a resource.

    Attributes:
        retain_on_delete: Keep the resource when the stack is destroyed
        point_in_time_recovery_enabled: Enable continuous backups for tables
        deletion_protection: Enable provider-side deletion protection
    """
    retain_on_delete: bool
    point_in_time_recovery_enabled: bool
    deletion_protection: bool = False


PRODUCTION_DECISION = LifecycleDecision(
    retain_on_delete=True,
    point_in_time_recovery_enabled=True,
    deletion_protection=True,
)
NON_PRODUCTION_DECISION = LifecycleDecision(
    retain_on_delete=False,
    point_in_time_recovery_enabled=False,
    deletion_protection=False,
)


def decide(cfg: NamingConfig) -> LifecycleDecision:
    """
    Select the lifecycle decision for a naming config's environment.

    Args:
        cfg: Naming config of the current deployment

    Returns:
        PRODUCTION_DECISION for production tokens, NON_PRODUCTION_DECISION
        for everything else
    """
    if cfg.is_production:
        return PRODUCTION_DECISION
    if cfg.environment not in KNOWN_ENVIRONMENTS:
        logger.warning(
            "Unrecognized environment %r: applying non-production lifecycle "
            "(resources are destroyed with the stack)",
            cfg.environment,
        )
    return NON_PRODUCTION_DECISION


def resource_options(
    decision: LifecycleDecision,
    parent: pulumi.Resource | None = None,
    **kwargs: Any,
) -> pulumi.ResourceOptions:
    """
    Map a lifecycle decision onto Pulumi resource options.

    Args:
        decision: Lifecycle decision for the resource
        parent: Parent component resource
        **kwargs: Additional ResourceOptions arguments

    Returns:
        ResourceOptions with retain_on_delete set from the decision
    """
    return pulumi.ResourceOptions(
        parent=parent,
        retain_on_delete=decision.retain_on_delete,
        **kwargs,
    )
