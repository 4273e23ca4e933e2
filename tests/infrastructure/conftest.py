"""Pytest fixtures for infrastructure tests."""

import sys
from pathlib import Path

import pytest

from appre_iac.configs.base import EnvironmentConfig, NamingConfig
from appre_iac.configs.constants import DEFAULT_FROM_EMAIL


@pytest.fixture(scope="session", autouse=True)
def add_project_to_path():
    """Add the project root to Python path for imports."""
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))
    yield
    # Cleanup
    sys.path.remove(str(project_root))


@pytest.fixture
def iac_package_root():
    """Return the appre_iac package directory."""
    return Path(__file__).parent.parent.parent / "appre_iac"


@pytest.fixture
def python_files_in_package(iac_package_root):
    """Return all Python files in the appre_iac package."""
    return [f for f in iac_package_root.rglob("*.py") if "__pycache__" not in str(f)]


@pytest.fixture
def test_cfg():
    """Naming config for the 'test' environment."""
    return NamingConfig(app_identity="appre", environment="test")


@pytest.fixture
def prod_cfg():
    """Naming config for the 'prod' environment."""
    return NamingConfig(app_identity="appre", environment="prod")


def make_environment_config(naming: NamingConfig) -> EnvironmentConfig:
    return EnvironmentConfig(
        naming=naming,
        region="us-east-1",
        account="123456789012",
        lambda_memory=256,
        lambda_timeout=30,
        from_email=DEFAULT_FROM_EMAIL,
        lambda_asset_dir="target/lambda",
    )


@pytest.fixture
def test_env_config(test_cfg):
    """Full environment config for the 'test' environment."""
    return make_environment_config(test_cfg)


@pytest.fixture
def prod_env_config(prod_cfg):
    """Full environment config for the 'prod' environment."""
    return make_environment_config(prod_cfg)
