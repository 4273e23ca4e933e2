"""
Tests for retention and durability decisions.
"""

import logging

import pytest

from appre_iac.configs.base import NamingConfig
from appre_iac.utils.lifecycle import (
    NON_PRODUCTION_DECISION,
    PRODUCTION_DECISION,
    decide,
    resource_options,
)


class TestDecide:
    """Validate lifecycle selection per environment."""

    @pytest.mark.parametrize("environment", ["prod", "production"])
    def test_production_retains(self, environment):
        decision = decide(NamingConfig("appre", environment))

        assert decision is PRODUCTION_DECISION
        assert decision.retain_on_delete is True
        assert decision.point_in_time_recovery_enabled is True
        assert decision.deletion_protection is True

    @pytest.mark.parametrize("environment", ["dev", "test", "staging"])
    def test_non_production_destroys(self, environment):
        decision = decide(NamingConfig("appre", environment))

        assert decision is NON_PRODUCTION_DECISION
        assert decision.retain_on_delete is False
        assert decision.point_in_time_recovery_enabled is False

    def test_misspelled_production_is_not_retained(self, caplog):
        """Unknown tokens take the destructive branch and log a warning."""
        with caplog.at_level(logging.WARNING, logger="appre_iac.utils.lifecycle"):
            decision = decide(NamingConfig("appre", "prdo"))

        assert decision is NON_PRODUCTION_DECISION
        assert "prdo" in caplog.text

    def test_known_environment_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="appre_iac.utils.lifecycle"):
            decide(NamingConfig("appre", "dev"))

        assert caplog.text == ""


class TestResourceOptions:
    """Validate mapping onto Pulumi resource options."""

    def test_retain_flag(self):
        assert resource_options(PRODUCTION_DECISION).retain_on_delete is True
        assert resource_options(NON_PRODUCTION_DECISION).retain_on_delete is False

    def test_extra_options_pass_through(self):
        options = resource_options(NON_PRODUCTION_DECISION, protect=False)
        assert options.protect is False
