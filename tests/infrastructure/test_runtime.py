"""
Tests for runtime base-name resolution.
"""

import pytest

from appre_iac.configs.settings import NamingSettings
from appre_iac.core.exceptions import InvalidNamingConfigError, UnresolvableNameError
from appre_iac.runtime import RuntimeNames
from appre_iac.utils.naming import ResourceKind


class TestRuntimeNames:
    """Validate name resolution inside deployed functions."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("APP_NAME", "appre")
        monkeypatch.setenv("ENVIRONMENT", "test")

        names = RuntimeNames.from_env(NamingSettings(_env_file=None))

        assert names.template("otp") == "appre-template-otp-test"
        assert names.table("auth_otps") == "appre-table-auth_otps-test"
        assert names.queue("email_queue") == "appre-queue-email_queue-test"
        assert names.function("email_processor") == "appre-function-email_processor-test"
        assert names.identity_store("users") == "appre-identity-users-test"

    def test_missing_app_name(self, monkeypatch):
        monkeypatch.delenv("APP_NAME", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "test")

        with pytest.raises(InvalidNamingConfigError, match="APP_NAME not set"):
            RuntimeNames.from_env(NamingSettings(_env_file=None))

    def test_missing_environment(self, monkeypatch):
        monkeypatch.setenv("APP_NAME", "appre")
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        with pytest.raises(InvalidNamingConfigError, match="ENVIRONMENT not set"):
            RuntimeNames.from_env(NamingSettings(_env_file=None))

    def test_base_name_of(self, test_cfg):
        names = RuntimeNames.from_config(test_cfg)

        assert names.base_name_of("appre-template-welcome-test", ResourceKind.TEMPLATE) == "welcome"
        with pytest.raises(UnresolvableNameError):
            names.base_name_of("appre-template-welcome-prod", ResourceKind.TEMPLATE)

    def test_matches_deployment_names(self, test_cfg):
        """Runtime resolution agrees with the names the stack deployed."""
        from appre_iac.utils.naming import ResourceNamer

        assert RuntimeNames.from_config(test_cfg).table("users") == ResourceNamer(test_cfg).table("users")
