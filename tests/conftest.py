"""
Pytest configuration and shared fixtures for PlatformKit tests.
"""

from pathlib import Path

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.installations import (
    mock_installation,
    project_root,
)

from platformkit.config.parser import PlatformConfig


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def platform_config(mock_installation) -> PlatformConfig:
    """Configuration pointing at the synthetic installation."""
    return PlatformConfig(developer_dir=mock_installation.developer_dir)


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    """Create sample platformkit.yaml configuration."""
    config_content = """version: 1
apple:
  developer_dir: /Applications/Xcode.app/Contents/Developer
  extra_toolchain_paths:
    - /opt/toolchains
  extra_platform_paths:
    - /opt/platforms
  target_sdk_versions:
    iphoneos: "9.0"
    watchos: "2.0"
swift:
  version: 2.3
cxx:
  debug_path_sanitizer_limit: 200
"""
    config_file = tmp_path / "platformkit.yaml"
    config_file.write_text(config_content)
    return config_file
