"""
Core functionality for PlatformKit.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    PlatformKitError,
    ConfigError,
    ConfigurationError,
    ToolNotFoundError,
    VersionResolutionError,
    SanitizerMappingError,
)

from .filesystem import (
    find_executable_in,
    is_executable_file,
    iter_bundles,
)

from .plist import PropertyListReader

__all__ = [
    "PlatformKitError",
    "ConfigError",
    "ConfigurationError",
    "ToolNotFoundError",
    "VersionResolutionError",
    "SanitizerMappingError",
    "find_executable_in",
    "is_executable_file",
    "iter_bundles",
    "PropertyListReader",
]
