"""
IAM roles component for environment-scoped compute roles.

Creates, per role grant:
- Role assumable by the grant's service principal
- Managed policy attachments (basic Lambda execution by default)
- Inline policy rendered from the grant's scoped statements
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.stacks.composer import RoleGrant
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.policies import POLICY_VERSION, render_policy


@dataclass
class IamRoleOutputs:
    """Output values from IAM roles component, keyed by role base name."""
    role_arns: dict[str, pulumi.Output[str]]
    role_names: dict[str, pulumi.Output[str]]


def assume_role_policy(service: str) -> str:
    """Render the trust policy for a service principal."""
    return json.dumps({
        "Version": POLICY_VERSION,
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"Service": service},
            "Action": "sts:AssumeRole",
        }],
    })


class ScopedRolesComponent(pulumi.ComponentResource):
    """
    IAM roles whose inline policies only reach resources of one environment.

    Statements arrive already scoped by the AccessPolicyBuilder; this
    component renders them without modification.
    """

    def __init__(
        self,
        name: str,
        grants: Sequence[RoleGrant],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:security:ScopedRoles", name, None, opts)

        self.roles: dict[str, aws.iam.Role] = {}

        for grant in grants:
            spec = grant.role
            child_opts = resource_options(spec.lifecycle, parent=self)

            role = aws.iam.Role(
                f"{name}-{spec.base_name}-role",
                name=spec.physical_name,
                assume_role_policy=assume_role_policy(spec.properties["service"]),
                tags=spec.tags.as_dict(),
                opts=child_opts,
            )
            self.roles[spec.base_name] = role

            for i, policy_arn in enumerate(spec.properties["managed_policy_arns"]):
                aws.iam.RolePolicyAttachment(
                    f"{name}-{spec.base_name}-managed-{i}",
                    role=role.name,
                    policy_arn=policy_arn,
                    opts=child_opts,
                )

            if grant.statements:
                aws.iam.RolePolicy(
                    f"{name}-{spec.base_name}-policy",
                    role=role.id,
                    policy=render_policy(grant.statements),
                    opts=child_opts,
                )

        self.register_outputs({
            "role_arns": {base: role.arn for base, role in self.roles.items()},
            "role_names": {base: role.name for base, role in self.roles.items()},
        })

    def get_outputs(self) -> IamRoleOutputs:
        """Get IAM role output values."""
        return IamRoleOutputs(
            role_arns={base: role.arn for base, role in self.roles.items()},
            role_names={base: role.name for base, role in self.roles.items()},
        )
