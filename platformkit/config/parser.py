"""YAML configuration parser for PlatformKit.

This module provides parsing and validation for platformkit.yaml configuration
files:

    version: 1
    apple:
      developer_dir: /Applications/Xcode.app/Contents/Developer
      extra_toolchain_paths: [/opt/toolchains]
      extra_platform_paths: [/opt/platforms]
      target_sdk_versions:
        iphoneos: "9.0"
    swift:
      version: "2.3"
    cxx:
      debug_path_sanitizer_limit: 250
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.exceptions import ConfigError
from ..discovery.models import ApplePlatform

DEVELOPER_DIR_ENV = "DEVELOPER_DIR"
DEFAULT_DEBUG_PATH_SANITIZER_LIMIT = 250
SWIFT_TOOLCHAIN_PREFIX = "com.apple.dt.toolchain.Swift_"


def swift_version_to_toolchain_identifier(version: str) -> str:
    """
    Map a Swift language version to its toolchain identifier.

    Example:
        >>> swift_version_to_toolchain_identifier("2.3")
        'com.apple.dt.toolchain.Swift_2_3'
    """
    return SWIFT_TOOLCHAIN_PREFIX + version.replace(".", "_")


@dataclass
class PlatformConfig:
    """Complete PlatformKit configuration."""

    version: int = 1
    developer_dir: Optional[Path] = None
    extra_toolchain_paths: List[Path] = field(default_factory=list)
    extra_platform_paths: List[Path] = field(default_factory=list)
    target_sdk_versions: Dict[ApplePlatform, str] = field(default_factory=dict)
    swift_version: Optional[str] = None
    debug_path_sanitizer_limit: int = DEFAULT_DEBUG_PATH_SANITIZER_LIMIT

    def target_sdk_version(self, platform: ApplePlatform) -> Optional[str]:
        """Get the configured minimum OS version for a platform kind, if any."""
        return self.target_sdk_versions.get(platform)

    @property
    def swift_toolchain_identifier(self) -> Optional[str]:
        """Toolchain identifier pinned by the Swift version, if configured."""
        if self.swift_version is None:
            return None
        return swift_version_to_toolchain_identifier(self.swift_version)


def parse_config(config_path: Path, use_environment: bool = False) -> PlatformConfig:
    """
    Parse platformkit.yaml configuration file.

    Args:
        config_path: Path to platformkit.yaml
        use_environment: Fall back to $DEVELOPER_DIR when developer_dir is unset

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    return config_from_dict(data, use_environment=use_environment)


def config_from_dict(data: Any, use_environment: bool = False) -> PlatformConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    apple = _section(data, "apple")
    swift = _section(data, "swift")
    cxx = _section(data, "cxx")

    developer_dir = apple.get("developer_dir")
    if developer_dir is None and use_environment:
        developer_dir = os.environ.get(DEVELOPER_DIR_ENV) or None
    if developer_dir is not None and not isinstance(developer_dir, str):
        raise ConfigError("apple.developer_dir must be a string")

    swift_version = swift.get("version")
    if swift_version is not None:
        swift_version = str(swift_version)

    return PlatformConfig(
        version=data["version"],
        developer_dir=Path(developer_dir).expanduser() if developer_dir else None,
        extra_toolchain_paths=_parse_paths(apple, "extra_toolchain_paths"),
        extra_platform_paths=_parse_paths(apple, "extra_platform_paths"),
        target_sdk_versions=_parse_target_sdk_versions(
            apple.get("target_sdk_versions", {})
        ),
        swift_version=swift_version,
        debug_path_sanitizer_limit=_parse_sanitizer_limit(cxx),
    )


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    return section


def _parse_paths(section: dict, key: str) -> List[Path]:
    """Parse a list of directory paths."""
    value = section.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ConfigError(f"{key} must be a list of paths")
    return [Path(p).expanduser() for p in value]


def _parse_target_sdk_versions(data: Any) -> Dict[ApplePlatform, str]:
    """Parse per-platform minimum OS version overrides."""
    if not isinstance(data, dict):
        raise ConfigError("target_sdk_versions must be a mapping")

    versions = {}
    for name, version in data.items():
        platform = ApplePlatform.from_name(str(name))
        if platform is None:
            valid = [p.value for p in ApplePlatform]
            raise ConfigError(
                f"Invalid platform in target_sdk_versions: {name} (expected one of {valid})"
            )
        versions[platform] = str(version)
    return versions


def _parse_sanitizer_limit(section: dict) -> int:
    limit = section.get("debug_path_sanitizer_limit", DEFAULT_DEBUG_PATH_SANITIZER_LIMIT)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ConfigError(
            f"debug_path_sanitizer_limit must be a positive integer, got {limit!r}"
        )
    return limit
