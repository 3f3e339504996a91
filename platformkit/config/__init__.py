"""Configuration module for PlatformKit.

This module provides YAML configuration parsing and validation for platformkit.yaml.
"""

from platformkit.config.parser import (
    PlatformConfig,
    ConfigError,
    config_from_dict,
    parse_config,
    swift_version_to_toolchain_identifier,
)

__all__ = [
    "PlatformConfig",
    "ConfigError",
    "config_from_dict",
    "parse_config",
    "swift_version_to_toolchain_identifier",
]
