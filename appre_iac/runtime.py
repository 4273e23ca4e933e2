"""
Runtime resource name resolution.

Lambda handlers and other runtime code address resources by base name; the
current environment comes from the APP_NAME and ENVIRONMENT variables that
the stack sets on every function.

Usage:
    names = RuntimeNames.from_env()
    template_name = names.template("otp")
"""

from dataclasses import dataclass

from appre_iac.configs.base import NamingConfig
from appre_iac.configs.settings import NamingSettings
from appre_iac.core.exceptions import InvalidNamingConfigError
from appre_iac.utils.naming import ResourceKind, ResourceNamer


@dataclass(frozen=True)
class RuntimeNames:
    """Resolves base names to physical names for the current environment."""

    namer: ResourceNamer

    @classmethod
    def from_config(cls, config: NamingConfig) -> "RuntimeNames":
        return cls(namer=ResourceNamer(config))

    @classmethod
    def from_env(cls, settings: NamingSettings | None = None) -> "RuntimeNames":
        """
        Create runtime names from APP_NAME and ENVIRONMENT.

        Args:
            settings: Pre-loaded settings (read from the environment if None)

        Raises:
            InvalidNamingConfigError: If either variable is not set
        """
        settings = settings or NamingSettings()
        if not settings.app_name:
            raise InvalidNamingConfigError("APP_NAME not set", field="app_name")
        if not settings.environment:
            raise InvalidNamingConfigError("ENVIRONMENT not set", field="environment")
        return cls.from_config(
            NamingConfig(app_identity=settings.app_name, environment=settings.environment)
        )

    @property
    def config(self) -> NamingConfig:
        return self.namer.config

    def table(self, base_name: str) -> str:
        return self.namer.table(base_name)

    def queue(self, base_name: str) -> str:
        return self.namer.queue(base_name)

    def template(self, base_name: str) -> str:
        return self.namer.template(base_name)

    def function(self, base_name: str) -> str:
        return self.namer.function(base_name)

    def identity_store(self, base_name: str) -> str:
        return self.namer.identity_store(base_name)

    def base_name_of(self, physical: str, kind: ResourceKind) -> str:
        """Recover the base name of a physical name in the current environment."""
        return self.namer.resolve(physical, kind)
