"""
Tests for physical resource naming.

Validates:
1. Physical names follow {app}-{kind}-{base}-{environment}
2. Names round-trip through extract_base_name
3. Distinct inputs never collide
4. Invalid base names and foreign names are rejected
"""

import itertools

import pytest

from appre_iac.configs.base import NamingConfig
from appre_iac.core.exceptions import (
    InvalidBaseNameError,
    InvalidNamingConfigError,
    UnresolvableNameError,
)
from appre_iac.utils.naming import (
    ResourceKind,
    ResourceNamer,
    extract_base_name,
    physical_name,
)


class TestNamingConfig:
    """Validate naming config construction."""

    @pytest.mark.parametrize("app_identity", ["appre", "my-app", "a", "app2"])
    def test_valid_app_identities(self, app_identity):
        """Lowercase identities with inner hyphens are accepted."""
        cfg = NamingConfig(app_identity=app_identity, environment="dev")
        assert cfg.app_identity == app_identity

    @pytest.mark.parametrize("app_identity", ["", "Appre", "-appre", "appre-", "my--app", "app_re"])
    def test_invalid_app_identities(self, app_identity):
        """Identities that would break name parsing are rejected."""
        with pytest.raises(InvalidNamingConfigError):
            NamingConfig(app_identity=app_identity, environment="dev")

    @pytest.mark.parametrize("environment", ["", "Prod", "pr-1", "pr_1", "1dev"])
    def test_invalid_environments(self, environment):
        """Environment tokens may not contain the delimiter."""
        with pytest.raises(InvalidNamingConfigError):
            NamingConfig(app_identity="appre", environment=environment)

    def test_production_detection(self):
        """prod and production are production tokens."""
        assert NamingConfig("appre", "prod").is_production is True
        assert NamingConfig("appre", "production").is_production is True
        assert NamingConfig("appre", "staging").is_production is False
        assert NamingConfig("appre", "prdo").is_production is False


class TestPhysicalName:
    """Validate physical name generation."""

    def test_template_name(self, test_cfg):
        """Template names carry the kind namespace and environment suffix."""
        assert physical_name(test_cfg, ResourceKind.TEMPLATE, "otp") == "appre-template-otp-test"

    def test_multi_word_base_name(self, test_cfg):
        """Words inside a base name are joined with underscores."""
        assert physical_name(test_cfg, ResourceKind.TABLE, "auth_otps") == "appre-table-auth_otps-test"

    def test_name_is_deterministic(self, test_cfg):
        """Same inputs always produce the same name."""
        first = physical_name(test_cfg, ResourceKind.QUEUE, "email_queue")
        second = physical_name(NamingConfig("appre", "test"), ResourceKind.QUEUE, "email_queue")
        assert first == second

    def test_environment_is_last_segment(self, test_cfg, prod_cfg):
        """Every name ends with the environment token."""
        for kind in ResourceKind:
            base = "users"
            assert physical_name(test_cfg, kind, base).endswith("-test")
            assert physical_name(prod_cfg, kind, base).endswith("-prod")

    def test_base_name_with_environment_suffix_rejected(self, test_cfg):
        """A base name that already carries a suffix is rejected."""
        with pytest.raises(InvalidBaseNameError) as exc_info:
            physical_name(test_cfg, ResourceKind.TEMPLATE, "otp-test")

        assert exc_info.value.base_name == "otp-test"
        assert "'-'" in exc_info.value.reason

    @pytest.mark.parametrize("base_name", ["", "Otp", "1otp", "otp!", "otp name"])
    def test_invalid_base_names_rejected(self, test_cfg, base_name):
        """Base names outside the character class are rejected."""
        with pytest.raises(InvalidBaseNameError):
            physical_name(test_cfg, ResourceKind.TEMPLATE, base_name)

    def test_bucket_rejects_underscore(self, test_cfg):
        """S3 bucket base names cannot contain underscores."""
        assert physical_name(test_cfg, ResourceKind.BUCKET, "assets") == "appre-bucket-assets-test"
        with pytest.raises(InvalidBaseNameError):
            physical_name(test_cfg, ResourceKind.BUCKET, "user_assets")

    def test_length_limit_enforced(self, test_cfg):
        """Names longer than the provider limit are rejected."""
        limit = ResourceKind.FUNCTION.max_length
        with pytest.raises(InvalidBaseNameError) as exc_info:
            physical_name(test_cfg, ResourceKind.FUNCTION, "f" * limit)

        assert str(limit) in exc_info.value.reason

    def test_name_at_length_limit_accepted(self, test_cfg):
        """A name exactly at the limit is accepted."""
        overhead = len("appre-function--test")
        base = "f" * (ResourceKind.FUNCTION.max_length - overhead)
        name = physical_name(test_cfg, ResourceKind.FUNCTION, base)
        assert len(name) == ResourceKind.FUNCTION.max_length


class TestExtractBaseName:
    """Validate base name recovery."""

    def test_round_trip(self, test_cfg):
        """Extracting from a generated name returns the base name."""
        for kind in ResourceKind:
            base = "emailqueue" if kind is ResourceKind.BUCKET else "email_queue"
            name = physical_name(test_cfg, kind, base)
            assert extract_base_name(name, test_cfg, kind) == base

    def test_other_environment_unresolvable(self, prod_cfg):
        """A test-environment name cannot be resolved under a prod config."""
        with pytest.raises(UnresolvableNameError):
            extract_base_name("appre-template-otp-test", prod_cfg, ResourceKind.TEMPLATE)

    def test_other_kind_unresolvable(self, test_cfg):
        """A template name is not a table name."""
        with pytest.raises(UnresolvableNameError):
            extract_base_name("appre-template-otp-test", test_cfg, ResourceKind.TABLE)

    def test_other_app_unresolvable(self, test_cfg):
        """Names of another application are rejected."""
        with pytest.raises(UnresolvableNameError):
            extract_base_name("other-template-otp-test", test_cfg, ResourceKind.TEMPLATE)

    def test_nested_suffix_unresolvable(self, test_cfg):
        """A middle segment containing the delimiter is not a valid base name."""
        with pytest.raises(UnresolvableNameError):
            extract_base_name("appre-template-otp-prod-test", test_cfg, ResourceKind.TEMPLATE)

    def test_empty_base_unresolvable(self, test_cfg):
        """A name with no base segment is rejected."""
        with pytest.raises(UnresolvableNameError):
            extract_base_name("appre-template--test", test_cfg, ResourceKind.TEMPLATE)

    def test_hyphenated_app_identity(self):
        """Hyphens inside the app identity do not confuse extraction."""
        cfg = NamingConfig(app_identity="my-app", environment="dev")
        name = physical_name(cfg, ResourceKind.TABLE, "users")
        assert name == "my-app-table-users-dev"
        assert extract_base_name(name, cfg, ResourceKind.TABLE) == "users"


class TestInjectivity:
    """Distinct (config, kind, base) triples never share a physical name."""

    def test_no_collisions(self):
        configs = [
            NamingConfig(app, env)
            for app, env in itertools.product(["appre", "my-app", "my"], ["dev", "test", "prod"])
        ]
        bases = ["otp", "users", "auth_otps", "user_sessions", "app_table"]
        seen: dict[str, tuple] = {}

        for cfg, kind, base in itertools.product(configs, ResourceKind, bases):
            if kind is ResourceKind.BUCKET and "_" in base:
                continue
            name = physical_name(cfg, kind, base)
            assert name not in seen, f"{name} produced by {seen.get(name)} and {(cfg, kind, base)}"
            seen[name] = (cfg, kind, base)


class TestResourceNamer:
    """Validate the namer facade."""

    def test_kind_helpers(self, test_cfg):
        """Helpers delegate to physical_name for their kind."""
        namer = ResourceNamer(test_cfg)

        assert namer.table("users") == "appre-table-users-test"
        assert namer.queue("email_queue") == "appre-queue-email_queue-test"
        assert namer.template("welcome") == "appre-template-welcome-test"
        assert namer.identity_store("users") == "appre-identity-users-test"
        assert namer.function("email_processor") == "appre-function-email_processor-test"
        assert namer.role("auth_lambda") == "appre-role-auth_lambda-test"
        assert namer.bucket("assets") == "appre-bucket-assets-test"

    def test_log_group(self, test_cfg):
        """Log group names follow the Lambda convention."""
        namer = ResourceNamer(test_cfg)
        assert namer.log_group("email_processor") == "/aws/lambda/appre-function-email_processor-test"

    def test_owns(self, test_cfg, prod_cfg):
        """A namer only owns names of its own config."""
        test_namer = ResourceNamer(test_cfg)
        prod_namer = ResourceNamer(prod_cfg)
        name = test_namer.table("users")

        assert test_namer.owns(name, ResourceKind.TABLE) is True
        assert prod_namer.owns(name, ResourceKind.TABLE) is False
        assert test_namer.owns(name, ResourceKind.QUEUE) is False

    def test_resolve(self, test_cfg):
        namer = ResourceNamer(test_cfg)
        assert namer.resolve("appre-queue-email_dlq-test", ResourceKind.QUEUE) == "email_dlq"
