"""
DynamoDB tables component.

Creates one on-demand table per table spec:
- AWS-managed server-side encryption
- TTL attribute and global secondary indexes
- Point-in-time recovery and retention from the lifecycle decision
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.stacks.composer import ResourceSpec, TableKey
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.naming import ResourceKind


@dataclass
class DynamoTablesOutputs:
    """Output values from DynamoDB tables component, keyed by base name."""
    table_names: dict[str, pulumi.Output[str]]
    table_arns: dict[str, pulumi.Output[str]]


def _attributes(spec: ResourceSpec) -> list[aws.dynamodb.TableAttributeArgs]:
    """Collect every key attribute used by the table or its indexes."""
    keys: dict[str, TableKey] = {}
    candidates = [spec.properties["partition_key"], spec.properties["sort_key"]]
    for index in spec.properties["indexes"]:
        candidates.extend([index.partition_key, index.sort_key])
    for key in candidates:
        if key is not None:
            keys.setdefault(key.name, key)
    return [
        aws.dynamodb.TableAttributeArgs(name=key.name, type=key.type)
        for key in keys.values()
    ]


class DynamoTablesComponent(pulumi.ComponentResource):
    """
    DynamoDB tables of one service.

    Non-production tables are destroyed with the stack; production tables
    are retained and keep continuous backups.
    """

    def __init__(
        self,
        name: str,
        tables: Sequence[ResourceSpec],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:DynamoTables", name, None, opts)

        self.tables: dict[str, aws.dynamodb.Table] = {}

        for spec in tables:
            if spec.kind is not ResourceKind.TABLE:
                raise ValueError(f"{spec.base_name!r} is not a table spec")

            props = spec.properties
            sort_key: TableKey | None = props["sort_key"]
            ttl_attribute = props["ttl_attribute"]

            self.tables[spec.base_name] = aws.dynamodb.Table(
                f"{name}-{spec.base_name}",
                name=spec.physical_name,
                billing_mode="PAY_PER_REQUEST",
                hash_key=props["partition_key"].name,
                range_key=sort_key.name if sort_key else None,
                attributes=_attributes(spec),
                global_secondary_indexes=[
                    aws.dynamodb.TableGlobalSecondaryIndexArgs(
                        name=index.name,
                        hash_key=index.partition_key.name,
                        range_key=index.sort_key.name if index.sort_key else None,
                        projection_type=index.projection,
                    )
                    for index in props["indexes"]
                ] or None,
                ttl=aws.dynamodb.TableTtlArgs(
                    attribute_name=ttl_attribute,
                    enabled=True,
                ) if ttl_attribute else None,
                server_side_encryption=aws.dynamodb.TableServerSideEncryptionArgs(
                    enabled=True,
                ),
                point_in_time_recovery=aws.dynamodb.TablePointInTimeRecoveryArgs(
                    enabled=spec.lifecycle.point_in_time_recovery_enabled,
                ),
                deletion_protection_enabled=spec.lifecycle.deletion_protection,
                tags=spec.tags.as_dict(),
                opts=resource_options(spec.lifecycle, parent=self),
            )

        self.register_outputs({
            "table_names": {base: table.name for base, table in self.tables.items()},
            "table_arns": {base: table.arn for base, table in self.tables.items()},
        })

    def get_outputs(self) -> DynamoTablesOutputs:
        """Get DynamoDB table output values."""
        return DynamoTablesOutputs(
            table_names={base: table.name for base, table in self.tables.items()},
            table_arns={base: table.arn for base, table in self.tables.items()},
        )
