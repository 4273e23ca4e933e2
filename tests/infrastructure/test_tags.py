"""
Tests for tag factories.

Validates:
1. Every tag set carries the config's Environment tag
2. Callers cannot override Environment
3. TagBuilder adds domain and component tags
"""

import pytest

from appre_iac.configs.constants import ENVIRONMENT_TAG_KEY
from appre_iac.core.exceptions import TagConflictError
from appre_iac.utils.tags import TagBuilder, TagSet, merge_tags, tags_for


class TestTagsFor:
    """Validate the standard tag set."""

    def test_required_tags(self, test_cfg):
        """Standard tags include Environment, Application and ManagedBy."""
        tags = tags_for(test_cfg)

        assert tags["Environment"] == "test"
        assert tags["Application"] == "appre"
        assert tags["ManagedBy"] == "pulumi"
        assert tags.environment == "test"

    def test_extra_tags_merged(self, test_cfg):
        """Extra tags are included alongside the standard ones."""
        tags = tags_for(test_cfg, {"Owner": "payments-team"})

        assert tags["Owner"] == "payments-team"
        assert tags["Environment"] == "test"

    def test_extra_may_repeat_same_environment(self, test_cfg):
        """Restating the correct environment is harmless."""
        tags = tags_for(test_cfg, {"Environment": "test"})
        assert tags.environment == "test"

    def test_conflicting_environment_rejected(self, test_cfg):
        """Extra tags cannot set another environment."""
        with pytest.raises(TagConflictError) as exc_info:
            tags_for(test_cfg, {"Environment": "prod"})

        assert exc_info.value.details["expected"] == "test"
        assert exc_info.value.details["actual"] == "prod"

    def test_tag_set_is_immutable(self, test_cfg):
        """TagSet does not support item assignment."""
        tags = tags_for(test_cfg)
        with pytest.raises(TypeError):
            tags["Environment"] = "prod"  # type: ignore[index]

    def test_as_dict_is_a_copy(self, test_cfg):
        """Mutating the dict copy leaves the tag set untouched."""
        tags = tags_for(test_cfg)
        plain = tags.as_dict()
        plain["Environment"] = "prod"
        assert tags.environment == "test"

    def test_tag_set_requires_environment(self):
        """A tag set without Environment cannot be built."""
        with pytest.raises(TagConflictError):
            TagSet({"Application": "appre"})


class TestMergeTags:
    """Validate tag merging."""

    def test_later_mappings_win(self, test_cfg):
        base = tags_for(test_cfg, {"Shared": "original"})
        merged = merge_tags(base, {"Shared": "updated"}, {"Tag2": "value2"})

        assert merged["Shared"] == "updated"
        assert merged["Tag2"] == "value2"
        assert merged.environment == "test"

    def test_environment_cannot_change(self, test_cfg):
        base = tags_for(test_cfg)
        with pytest.raises(TagConflictError):
            merge_tags(base, {ENVIRONMENT_TAG_KEY: "prod"})


class TestTagBuilder:
    """Validate per-service tag building."""

    def test_base_tags_include_domain(self, test_cfg):
        builder = TagBuilder(test_cfg, "auth")
        tags = builder.base_tags()

        assert tags["Domain"] == "auth"
        assert tags["Environment"] == "test"

    def test_component_tags(self, test_cfg):
        builder = TagBuilder(test_cfg, "notifications")
        tags = builder.template_tags("otp")

        assert tags["Component"] == "ses"
        assert tags["Template"] == "otp"
        assert tags["Domain"] == "notifications"

    def test_every_kind_helper_carries_environment(self, prod_cfg):
        builder = TagBuilder(prod_cfg, "auth")
        helpers = [
            builder.table_tags,
            builder.queue_tags,
            builder.template_tags,
            builder.identity_store_tags,
            builder.function_tags,
            builder.role_tags,
        ]
        for helper in helpers:
            assert helper("users").environment == "prod"

    def test_builder_rejects_environment_override(self, test_cfg):
        builder = TagBuilder(test_cfg, "auth")
        with pytest.raises(TagConflictError):
            builder.base_tags(Environment="prod")
