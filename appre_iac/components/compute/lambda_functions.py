"""
Lambda functions component for custom runtime handlers.

Creates, per function spec:
- CloudWatch log group named after the function
- provided.al2023 function from a zip asset directory
- Optional SQS event source mapping
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.configs.constants import (
    LAMBDA_DEFAULTS,
    LAMBDA_HANDLER,
    LAMBDA_RUNTIME,
    SQS_DEFAULTS,
)
from appre_iac.stacks.composer import ResourceSpec
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.naming import ResourceKind


@dataclass
class LambdaOutputs:
    """Output values from Lambda component, keyed by base name."""
    function_arns: dict[str, pulumi.Output[str]]
    function_names: dict[str, pulumi.Output[str]]


class LambdaFunctionsComponent(pulumi.ComponentResource):
    """
    Lambda functions of one service.

    Role ARNs and queue ARNs are looked up by physical name, so they must
    come from the same deployment plan as the function specs.
    """

    def __init__(
        self,
        name: str,
        functions: Sequence[ResourceSpec],
        role_arns: Mapping[str, pulumi.Input[str]],
        queue_arns: Mapping[str, pulumi.Input[str]] | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """
        Args:
            name: Component name
            functions: Function specs
            role_arns: Role physical name -> ARN
            queue_arns: Queue physical name -> ARN, for SQS event sources
            opts: Resource options
        """
        super().__init__("custom:compute:LambdaFunctions", name, None, opts)

        self.component_name = name
        queue_arns = queue_arns or {}
        self.functions: dict[str, aws.lambda_.Function] = {}

        for spec in functions:
            if spec.kind is not ResourceKind.FUNCTION:
                raise ValueError(f"{spec.base_name!r} is not a function spec")

            props = spec.properties
            child_opts = resource_options(spec.lifecycle, parent=self)

            # CloudWatch Log Group
            log_group = aws.cloudwatch.LogGroup(
                f"{name}-{spec.base_name}-logs",
                name=props["log_group"],
                retention_in_days=LAMBDA_DEFAULTS["log_retention_days"],
                tags=spec.tags.as_dict(),
                opts=child_opts,
            )

            function = aws.lambda_.Function(
                f"{name}-{spec.base_name}",
                name=spec.physical_name,
                role=role_arns[props["role"]],
                runtime=LAMBDA_RUNTIME,
                handler=LAMBDA_HANDLER,
                code=pulumi.FileArchive(props["asset"]),
                memory_size=props["memory_mb"],
                timeout=props["timeout_seconds"],
                environment=aws.lambda_.FunctionEnvironmentArgs(
                    variables=dict(props["environment"]),
                ),
                tracing_config=aws.lambda_.FunctionTracingConfigArgs(mode="Active"),
                tags=spec.tags.as_dict(),
                opts=resource_options(
                    spec.lifecycle,
                    parent=self,
                    depends_on=[log_group],
                ),
            )
            self.functions[spec.base_name] = function

            # SQS Event Source Mapping
            if props["queue_source"]:
                aws.lambda_.EventSourceMapping(
                    f"{name}-{spec.base_name}-sqs-trigger",
                    event_source_arn=queue_arns[props["queue_source"]],
                    function_name=function.arn,
                    batch_size=SQS_DEFAULTS["batch_size"],
                    function_response_types=["ReportBatchItemFailures"],
                    opts=child_opts,
                )

        self.register_outputs({
            "function_arns": {base: f.arn for base, f in self.functions.items()},
            "function_names": {base: f.name for base, f in self.functions.items()},
        })

    def allow_invoke(
        self,
        base_name: str,
        principal: str,
        source_arn: pulumi.Input[str],
    ) -> aws.lambda_.Permission:
        """Allow a service principal (e.g. cognito-idp.amazonaws.com) to invoke a function."""
        return aws.lambda_.Permission(
            f"{self.component_name}-{base_name}-invoke-{principal.split('.', 1)[0]}",
            action="lambda:InvokeFunction",
            function=self.functions[base_name].name,
            principal=principal,
            source_arn=source_arn,
            opts=pulumi.ResourceOptions(parent=self),
        )

    def get_outputs(self) -> LambdaOutputs:
        """Get Lambda output values."""
        return LambdaOutputs(
            function_arns={base: f.arn for base, f in self.functions.items()},
            function_names={base: f.name for base, f in self.functions.items()},
        )
