"""
Tests for the authentication and notification service plans.
"""

import json

import pytest

from appre_iac.configs.constants import ENVIRONMENT_CONDITION_KEY
from appre_iac.stacks.authentication import (
    AUTH_ROLE,
    TRIGGER_FUNCTIONS,
    USER_POOL,
    compose_authentication,
)
from appre_iac.stacks.notifications import (
    EMAIL_PROCESSOR,
    EMAIL_TEMPLATES,
    compose_notifications,
)
from appre_iac.utils.naming import ResourceKind
from appre_iac.utils.policies import is_environment_sensitive, render_policy


class TestNotificationsPlan:
    """Validate the notification service plan."""

    @pytest.fixture
    def plan(self, test_env_config):
        return compose_notifications(test_env_config, "123456789012")

    def test_templates(self, plan):
        templates = plan.group("templates")

        assert {spec.base_name for spec in templates} == set(EMAIL_TEMPLATES)
        assert templates.get("otp").physical_name == "appre-template-otp-test"
        assert "{{otp}}" in templates.get("otp").properties["html"]

    def test_queues(self, plan):
        queues = plan.group("queues")

        assert queues.get("email_queue").properties["dead_letter"] == "appre-queue-email_dlq-test"
        assert queues.get("email_dlq").properties["retention_seconds"] == 1209600

    def test_processor_function(self, plan):
        function = plan.group("functions").get(EMAIL_PROCESSOR)
        variables = function.properties["environment"]

        assert variables["OTP_TEMPLATE_NAME"] == "appre-template-otp-test"
        assert variables["NEWSLETTER_TEMPLATE_NAME"] == "appre-template-newsletter-test"
        assert variables["ENVIRONMENT"] == "test"
        assert function.properties["queue_source"] == "appre-queue-email_queue-test"
        assert function.properties["asset"].endswith("email-processor")

    def test_every_sensitive_statement_is_scoped(self, plan):
        """Only statements without sensitive actions may be exempt."""
        grant = plan.grant_for(EMAIL_PROCESSOR)

        for statement in grant.statements:
            if statement.condition is None:
                assert not any(is_environment_sensitive(a) for a in statement.actions)
            else:
                assert statement.environment == "test"

    def test_rendered_policy(self, plan):
        document = json.loads(render_policy(plan.grant_for(EMAIL_PROCESSOR).statements))
        by_sid = {statement["Sid"]: statement for statement in document["Statement"]}

        assert by_sid["SendEmail"]["Condition"]["StringEquals"] == {
            ENVIRONMENT_CONDITION_KEY: "test",
            "ses:FromAddress": "noreply@appreciata.com",
        }
        assert "Condition" not in by_sid["ListTemplates"]
        assert (
            "arn:aws:sqs:us-east-1:123456789012:appre-queue-email_dlq-test"
            in by_sid["ConsumeEmailQueues"]["Resource"]
        )

    def test_prod_plan_is_disjoint(self, plan, prod_env_config):
        prod_plan = compose_notifications(prod_env_config, "123456789012")

        test_names = {spec.physical_name for spec in plan.resources()}
        prod_names = {spec.physical_name for spec in prod_plan.resources()}
        assert test_names.isdisjoint(prod_names)
        assert all(spec.lifecycle.retain_on_delete for spec in prod_plan.resources())


class TestAuthenticationPlan:
    """Validate the authentication service plan."""

    @pytest.fixture
    def plan(self, test_env_config):
        return compose_authentication(test_env_config, "123456789012")

    def test_tables(self, plan):
        tables = plan.group("tables")

        assert {spec.base_name for spec in tables} == {
            "auth_otps",
            "auth_rate_limits",
            "users",
            "user_sessions",
        }
        sessions = tables.get("user_sessions")
        assert sessions.properties["ttl_attribute"] == "expires_at"
        assert [index.name for index in sessions.properties["indexes"]] == [
            "user-sessions-index",
            "expires-at-index",
        ]

    def test_rate_limit_table_skips_pitr_in_prod(self, prod_env_config):
        plan = compose_authentication(prod_env_config, "123456789012")
        tables = plan.group("tables")

        assert tables.get("auth_rate_limits").lifecycle.point_in_time_recovery_enabled is False
        assert tables.get("users").lifecycle.point_in_time_recovery_enabled is True

    def test_user_pool_triggers(self, plan):
        pool = plan.group("identity").get(USER_POOL)
        triggers = pool.properties["triggers"]

        assert pool.physical_name == "appre-identity-users-test"
        assert set(triggers) == set(TRIGGER_FUNCTIONS)
        assert triggers["define_auth_challenge"] == "appre-function-auth_define_challenge-test"

    def test_functions_share_role(self, plan):
        for spec in plan.group("functions"):
            assert spec.properties["role"] == "appre-role-auth_lambda-test"

    def test_challenge_functions_get_table_names(self, plan):
        functions = plan.group("functions")
        create = functions.get("auth_create_challenge").properties["environment"]
        define = functions.get("auth_define_challenge").properties["environment"]

        assert create["OTP_TABLE_NAME"] == "appre-table-auth_otps-test"
        assert "OTP_TABLE_NAME" not in define
        assert functions.get("auth_define_challenge").properties["memory_mb"] == 128

    def test_role_grants(self, plan):
        grant = plan.grant_for(AUTH_ROLE)
        by_sid = {statement.sid: statement for statement in grant.statements}

        tables = by_sid["AuthTables"]
        assert tables.environment == "test"
        assert (
            "arn:aws:dynamodb:us-east-1:123456789012:table/appre-table-users-test/index/*"
            in tables.resources
        )
        assert by_sid["CognitoAdmin"].resources == (
            "arn:aws:cognito-idp:us-east-1:123456789012:userpool/*",
        )
        assert all(statement.condition is not None for statement in grant.statements)

    def test_role_in_resources(self, plan):
        roles = list(plan.resources(ResourceKind.ROLE))
        assert [role.physical_name for role in roles] == ["appre-role-auth_lambda-test"]
