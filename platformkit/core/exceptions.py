"""
Centralized exception hierarchy for PlatformKit.

Only configuration problems that make a single platform unusable are raised.
Missing or malformed auxiliary metadata is logged as a warning and reported
as an absent value instead.
"""

from pathlib import Path
from typing import Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class PlatformKitError(Exception):
    """Base exception for all PlatformKit errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(PlatformKitError):
    """Configuration file parsing or validation error."""

    pass


class ConfigurationError(PlatformKitError):
    """
    A platform cannot be assembled from the discovered installation.

    Raised per (SDK, architecture) pair. It never aborts assembly of other
    platforms.
    """

    pass


class ToolNotFoundError(ConfigurationError):
    """Raised when a required tool is not present in any search directory."""

    def __init__(self, tool: str, search_paths: Sequence[Path]):
        self.tool = tool
        self.search_paths = list(search_paths)
        paths = ", ".join(str(p) for p in self.search_paths)
        super().__init__(f"Cannot find tool {tool} in paths [{paths}]")


class VersionResolutionError(ConfigurationError):
    """Raised when neither toolchain versions nor a build version are known."""

    def __init__(self, sdk_name: str):
        self.sdk_name = sdk_name
        super().__init__(
            f"Failed to read toolchain versions and installation build version "
            f"for SDK {sdk_name}"
        )


class SanitizerMappingError(ConfigurationError):
    """Raised when debug path replacements are not one-to-one."""

    pass
