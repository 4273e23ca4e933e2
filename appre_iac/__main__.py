"""
Pulumi program entry point for Appre infrastructure.

Builds one deployment plan per service and instantiates components in
dependency order:
1. Configuration and logging
2. Service plans (names, tags, scoped grants, lifecycle)
3. IAM roles -> tables, queues, templates
4. Lambda functions -> Cognito user pool -> invoke permissions
"""

import logging

import pulumi
import pulumi_aws as aws

from appre_iac.configs.base import EnvironmentConfig
from appre_iac.configs.environment import get_config
from appre_iac.configs.settings import get_settings
from appre_iac.core.logger import configure_logging
from appre_iac.stacks.authentication import USER_POOL, compose_authentication
from appre_iac.stacks.composer import DeploymentPlan
from appre_iac.stacks.notifications import compose_notifications

# Storage
from appre_iac.components.storage.dynamodb_tables import DynamoTablesComponent

# Messaging
from appre_iac.components.messaging.sqs_queues import SqsQueuesComponent
from appre_iac.components.messaging.ses_templates import SesTemplatesComponent

# Identity
from appre_iac.components.identity.cognito_user_pool import CognitoUserPoolComponent

# Security
from appre_iac.components.security.iam_roles import ScopedRolesComponent

# Compute
from appre_iac.components.compute.lambda_functions import LambdaFunctionsComponent

logger = logging.getLogger(__name__)


def _role_arns(plan: DeploymentPlan, roles: ScopedRolesComponent) -> dict[str, pulumi.Output[str]]:
    """Map role physical names to ARNs for function wiring."""
    outputs = roles.get_outputs()
    return {
        grant.role.physical_name: outputs.role_arns[grant.role.base_name]
        for grant in plan.grants
    }


def _deploy_notifications(plan: DeploymentPlan) -> dict[str, pulumi.Output]:
    """Deploy email templates, queues and the email processor."""
    name = plan.domain

    roles = ScopedRolesComponent(name=f"{name}-roles", grants=plan.grants)

    templates = SesTemplatesComponent(
        name=f"{name}-templates",
        templates=plan.group("templates").resources,
    )
    template_outputs = templates.get_outputs()

    queue_specs = plan.group("queues").resources
    queues = SqsQueuesComponent(name=f"{name}-queues", queues=queue_specs)
    queue_outputs = queues.get_outputs()

    functions = LambdaFunctionsComponent(
        name=f"{name}-functions",
        functions=plan.group("functions").resources,
        role_arns=_role_arns(plan, roles),
        queue_arns={
            spec.physical_name: queue_outputs.queue_arns[spec.base_name]
            for spec in queue_specs
        },
    )
    function_outputs = functions.get_outputs()

    outputs: dict[str, pulumi.Output] = {}
    for base_name, queue_url in queue_outputs.queue_urls.items():
        outputs[f"{base_name}_url"] = queue_url
    for base_name, template_name in template_outputs.template_names.items():
        outputs[f"{base_name}_template_name"] = template_name
    for base_name, function_name in function_outputs.function_names.items():
        outputs[f"{base_name}_function_name"] = function_name
    return outputs


def _deploy_authentication(plan: DeploymentPlan) -> dict[str, pulumi.Output]:
    """Deploy auth tables, challenge functions and the user pool."""
    name = plan.domain

    roles = ScopedRolesComponent(name=f"{name}-roles", grants=plan.grants)

    tables = DynamoTablesComponent(
        name=f"{name}-tables",
        tables=plan.group("tables").resources,
    )
    table_outputs = tables.get_outputs()

    function_specs = plan.group("functions").resources
    functions = LambdaFunctionsComponent(
        name=f"{name}-functions",
        functions=function_specs,
        role_arns=_role_arns(plan, roles),
    )
    function_outputs = functions.get_outputs()

    pool_spec = plan.group("identity").get(USER_POOL)
    user_pool = CognitoUserPoolComponent(
        name=f"{name}-identity",
        pool=pool_spec,
        function_arns={
            spec.physical_name: function_outputs.function_arns[spec.base_name]
            for spec in function_specs
        },
    )
    pool_outputs = user_pool.get_outputs()

    # Grant Cognito permission to invoke the trigger functions
    for spec in function_specs:
        functions.allow_invoke(
            spec.base_name,
            principal="cognito-idp.amazonaws.com",
            source_arn=pool_outputs.user_pool_arn,
        )

    outputs: dict[str, pulumi.Output] = {
        "user_pool_id": pool_outputs.user_pool_id,
        "user_pool_arn": pool_outputs.user_pool_arn,
        "user_pool_client_id": pool_outputs.user_pool_client_id,
    }
    for base_name, table_name in table_outputs.table_names.items():
        outputs[f"{base_name}_table_name"] = table_name
    return outputs


def _resolve_account(config: EnvironmentConfig) -> str:
    """Use the configured account id, falling back to the caller identity."""
    if config.account:
        return config.account
    return aws.get_caller_identity().account_id


def main() -> None:
    """Deploy Appre authentication and notification infrastructure."""
    configure_logging(get_settings().log_level, stack=pulumi.get_stack())

    # Load configuration
    config = get_config()
    account = _resolve_account(config)

    notifications = compose_notifications(config, account)
    authentication = compose_authentication(config, account)

    outputs: dict[str, pulumi.Output | str] = {
        "app_name": config.app_name,
        "environment": config.environment,
    }
    outputs.update(_deploy_notifications(notifications))
    outputs.update(_deploy_authentication(authentication))

    logger.info(
        "Deploying %d resources for %s",
        sum(1 for plan in (notifications, authentication) for _ in plan.resources()),
        config.environment,
    )
    pulumi.log.info(
        f"Identity store: {authentication.group('identity').get(USER_POOL).physical_name}"
    )

    # Export to Pulumi stack
    for key, value in outputs.items():
        pulumi.export(key, value)


# Execute
main()
