"""
SQS queues component for async email processing.

Creates:
- Dead letter queues (specs without a dead letter target)
- Main queues with redrive policy to their dead letter queue
- Redrive allow policy on each dead letter queue
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.configs.constants import SQS_DEFAULTS
from appre_iac.stacks.composer import ResourceSpec
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.naming import ResourceKind


@dataclass
class SqsOutputs:
    """Output values from SQS queues component, keyed by base name."""
    queue_urls: dict[str, pulumi.Output[str]]
    queue_arns: dict[str, pulumi.Output[str]]


class SqsQueuesComponent(pulumi.ComponentResource):
    """
    SQS queues of one service.

    Dead letter queues are created first so redrive policies can reference
    their ARNs.
    """

    def __init__(
        self,
        name: str,
        queues: Sequence[ResourceSpec],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:messaging:SqsQueues", name, None, opts)

        self.queues: dict[str, aws.sqs.Queue] = {}
        by_physical: dict[str, aws.sqs.Queue] = {}

        for spec in queues:
            if spec.kind is not ResourceKind.QUEUE:
                raise ValueError(f"{spec.base_name!r} is not a queue spec")

        # Dead letter queues
        for spec in (s for s in queues if not s.properties["dead_letter"]):
            queue = self._queue(name, spec, redrive_policy=None)
            self.queues[spec.base_name] = queue
            by_physical[spec.physical_name] = queue

        # Main queues with redrive policy
        for spec in (s for s in queues if s.properties["dead_letter"]):
            target = spec.properties["dead_letter"]
            if target not in by_physical:
                raise ValueError(
                    f"Dead letter queue {target!r} of {spec.base_name!r} is not defined"
                )
            dlq = by_physical[target]
            max_receive_count = spec.properties["max_receive_count"]
            queue = self._queue(
                name,
                spec,
                redrive_policy=dlq.arn.apply(
                    lambda arn, count=max_receive_count: json.dumps({
                        "deadLetterTargetArn": arn,
                        "maxReceiveCount": count,
                    })
                ),
            )
            self.queues[spec.base_name] = queue
            by_physical[spec.physical_name] = queue

            # Allow DLQ to receive from main queue
            aws.sqs.RedriveAllowPolicy(
                f"{name}-{spec.base_name}-redrive-allow",
                queue_url=dlq.url,
                redrive_allow_policy=queue.arn.apply(
                    lambda arn: json.dumps({
                        "redrivePermission": "byQueue",
                        "sourceQueueArns": [arn],
                    })
                ),
                opts=pulumi.ResourceOptions(parent=self),
            )

        self.register_outputs({
            "queue_urls": {base: queue.url for base, queue in self.queues.items()},
            "queue_arns": {base: queue.arn for base, queue in self.queues.items()},
        })

    def _queue(
        self,
        name: str,
        spec: ResourceSpec,
        redrive_policy: pulumi.Input[str] | None,
    ) -> aws.sqs.Queue:
        props = spec.properties
        return aws.sqs.Queue(
            f"{name}-{spec.base_name}",
            name=spec.physical_name,
            visibility_timeout_seconds=props["visibility_timeout_seconds"],
            message_retention_seconds=(
                props["retention_seconds"] or SQS_DEFAULTS["message_retention_seconds"]
            ),
            redrive_policy=redrive_policy,
            sqs_managed_sse_enabled=True,
            tags=spec.tags.as_dict(),
            opts=resource_options(spec.lifecycle, parent=self),
        )

    def get_outputs(self) -> SqsOutputs:
        """Get SQS queue output values."""
        return SqsOutputs(
            queue_urls={base: queue.url for base, queue in self.queues.items()},
            queue_arns={base: queue.arn for base, queue in self.queues.items()},
        )
