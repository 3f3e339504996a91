"""
Tool and version resolution for PlatformKit.

This module provides functionality for:
- Resolving executables across ordered search directories
- Versioned tool values
- Composite version computation with a memoized build version lookup
"""

from platformkit.toolchain.finder import ToolResolver
from platformkit.toolchain.tools import VersionedTool
from platformkit.toolchain.versions import (
    BuildVersionCache,
    VersionResolver,
    read_installation_build_version,
)

__all__ = [
    "ToolResolver",
    "VersionedTool",
    "BuildVersionCache",
    "VersionResolver",
    "read_installation_build_version",
]
