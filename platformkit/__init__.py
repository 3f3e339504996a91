"""
PlatformKit - SDK and toolchain discovery for Apple platform builds.

Discovers SDKs and toolchains in a developer installation and assembles an
immutable platform descriptor for every SDK and architecture.
"""

from platformkit.config.parser import PlatformConfig, parse_config
from platformkit.core.exceptions import ConfigurationError, PlatformKitError
from platformkit.platforms.builder import build_platforms
from platformkit.platforms.descriptor import PlatformDescriptor

__version__ = "0.1.0"

__all__ = [
    "PlatformConfig",
    "parse_config",
    "ConfigurationError",
    "PlatformKitError",
    "build_platforms",
    "PlatformDescriptor",
]
