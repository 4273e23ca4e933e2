"""
Cognito user pool component for passwordless email sign-in.

Creates:
- User pool with email sign-in and custom auth Lambda triggers
- App client restricted to the custom auth flows
"""

from collections.abc import Mapping
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from appre_iac.configs.constants import TOKEN_VALIDITY
from appre_iac.stacks.composer import ResourceSpec
from appre_iac.utils.lifecycle import resource_options
from appre_iac.utils.naming import ResourceKind

CUSTOM_AUTH_FLOWS = [
    "ALLOW_CUSTOM_AUTH",
    "ALLOW_USER_AUTH",
    "ALLOW_REFRESH_TOKEN_AUTH",
]


@dataclass
class CognitoOutputs:
    """Output values from Cognito user pool component."""
    user_pool_id: pulumi.Output[str]
    user_pool_arn: pulumi.Output[str]
    user_pool_client_id: pulumi.Output[str]


class CognitoUserPoolComponent(pulumi.ComponentResource):
    """
    Cognito user pool driven by custom auth challenge triggers.

    Deletion protection and retention follow the pool's lifecycle decision.
    """

    def __init__(
        self,
        name: str,
        pool: ResourceSpec,
        function_arns: Mapping[str, pulumi.Input[str]],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        """
        Args:
            name: Component name
            pool: Identity store spec
            function_arns: Function physical name -> ARN for the pool's triggers
            opts: Resource options
        """
        super().__init__("custom:identity:CognitoUserPool", name, None, opts)

        if pool.kind is not ResourceKind.IDENTITY_STORE:
            raise ValueError(f"{pool.base_name!r} is not an identity store spec")

        child_opts = resource_options(pool.lifecycle, parent=self)
        triggers = {
            trigger: function_arns[function]
            for trigger, function in pool.properties["triggers"].items()
        }

        self.user_pool = aws.cognito.UserPool(
            f"{name}-user-pool",
            name=pool.physical_name,
            username_attributes=["email"],
            username_configuration=aws.cognito.UserPoolUsernameConfigurationArgs(
                case_sensitive=False,
            ),
            schemas=[
                aws.cognito.UserPoolSchemaArgs(
                    name="email",
                    attribute_data_type="String",
                    required=True,
                    mutable=True,
                ),
                aws.cognito.UserPoolSchemaArgs(
                    name="user_status",
                    attribute_data_type="String",
                    mutable=True,
                    string_attribute_constraints=aws.cognito.UserPoolSchemaStringAttributeConstraintsArgs(
                        min_length="1",
                        max_length="50",
                    ),
                ),
                aws.cognito.UserPoolSchemaArgs(
                    name="stripe_account_id",
                    attribute_data_type="String",
                    mutable=True,
                    string_attribute_constraints=aws.cognito.UserPoolSchemaStringAttributeConstraintsArgs(
                        min_length="1",
                        max_length="100",
                    ),
                ),
            ],
            # Not used for sign-in but required by Cognito
            password_policy=aws.cognito.UserPoolPasswordPolicyArgs(
                minimum_length=12,
                require_lowercase=True,
                require_uppercase=True,
                require_numbers=True,
                require_symbols=True,
            ),
            account_recovery_setting=aws.cognito.UserPoolAccountRecoverySettingArgs(
                recovery_mechanisms=[
                    aws.cognito.UserPoolAccountRecoverySettingRecoveryMechanismArgs(
                        name="verified_email",
                        priority=1,
                    ),
                ],
            ),
            lambda_config=aws.cognito.UserPoolLambdaConfigArgs(**triggers) if triggers else None,
            deletion_protection="ACTIVE" if pool.lifecycle.deletion_protection else "INACTIVE",
            tags=pool.tags.as_dict(),
            opts=child_opts,
        )

        self.client = aws.cognito.UserPoolClient(
            f"{name}-client",
            name=f"{pool.physical_name}-client",
            user_pool_id=self.user_pool.id,
            explicit_auth_flows=CUSTOM_AUTH_FLOWS,
            access_token_validity=TOKEN_VALIDITY["access_token_hours"],
            id_token_validity=TOKEN_VALIDITY["id_token_hours"],
            refresh_token_validity=TOKEN_VALIDITY["refresh_token_days"],
            token_validity_units=aws.cognito.UserPoolClientTokenValidityUnitsArgs(
                access_token="hours",
                id_token="hours",
                refresh_token="days",
            ),
            prevent_user_existence_errors="ENABLED",
            supported_identity_providers=["COGNITO"],
            generate_secret=False,
            opts=child_opts,
        )

        self.register_outputs({
            "user_pool_id": self.user_pool.id,
            "user_pool_arn": self.user_pool.arn,
            "user_pool_client_id": self.client.id,
        })

    def get_outputs(self) -> CognitoOutputs:
        """Get Cognito output values."""
        return CognitoOutputs(
            user_pool_id=self.user_pool.id,
            user_pool_arn=self.user_pool.arn,
            user_pool_client_id=self.client.id,
        )
