"""
SES email templates component.

SES v1 templates carry no tags; the Environment tag of each template spec
is kept in the deployment plan and the environment suffix of the template
name separates environments.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.stacks.composer import ResourceSpec
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.naming import ResourceKind


@dataclass
class SesTemplatesOutputs:
    """Output values from SES templates component, keyed by base name."""
    template_names: dict[str, pulumi.Output[str]]


class SesTemplatesComponent(pulumi.ComponentResource):
    """SES templates of one service."""

    def __init__(
        self,
        name: str,
        templates: Sequence[ResourceSpec],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:messaging:SesTemplates", name, None, opts)

        self.templates: dict[str, aws.ses.Template] = {}

        for spec in templates:
            if spec.kind is not ResourceKind.TEMPLATE:
                raise ValueError(f"{spec.base_name!r} is not a template spec")
            self.templates[spec.base_name] = aws.ses.Template(
                f"{name}-{spec.base_name}",
                name=spec.physical_name,
                subject=spec.properties["subject"],
                html=spec.properties["html"],
                text=spec.properties["text"],
                opts=resource_options(spec.lifecycle, parent=self),
            )

        self.register_outputs({
            "template_names": {base: t.name for base, t in self.templates.items()},
        })

    def get_outputs(self) -> SesTemplatesOutputs:
        """Get SES template output values."""
        return SesTemplatesOutputs(
            template_names={base: t.name for base, t in self.templates.items()},
        )
