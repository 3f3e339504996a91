"""
Installation discovery for PlatformKit.

This module provides functionality for:
- Toolchain bundle discovery
- SDK discovery and toolchain association
- The immutable discovery data model
"""

from platformkit.discovery.models import (
    ApplePlatform,
    PlatformTraits,
    Sdk,
    SdkPaths,
    Toolchain,
)
from platformkit.discovery.sdks import SdkDiscovery, discover_sdks
from platformkit.discovery.toolchains import ToolchainDiscovery, discover_toolchains

__all__ = [
    "ApplePlatform",
    "PlatformTraits",
    "Sdk",
    "SdkPaths",
    "Toolchain",
    "SdkDiscovery",
    "discover_sdks",
    "ToolchainDiscovery",
    "discover_toolchains",
]
