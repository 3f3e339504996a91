"""
Platform assembly for PlatformKit.

This module provides functionality for:
- Assembling a platform descriptor per (SDK, architecture) pair
- Debug path sanitization
- Optional Swift support
- Building every platform of an installation concurrently
"""

from platformkit.platforms.assembler import PlatformAssembler, ixlinker, tool_search_paths
from platformkit.platforms.builder import (
    PlatformBuilder,
    PlatformBuildResult,
    build_platforms,
    build_platforms_list,
    select_swift_toolchain,
)
from platformkit.platforms.descriptor import (
    AppleTools,
    CxxToolSet,
    PlatformDescriptor,
    platform_flavor,
    replace_invalid_characters,
)
from platformkit.platforms.sanitizer import (
    CompilerType,
    DebugPathSanitizer,
    MungingDebugPathSanitizer,
    PrefixMapDebugPathSanitizer,
)
from platformkit.platforms.swift import SwiftPlatform, build_swift_platform

__all__ = [
    "PlatformAssembler",
    "ixlinker",
    "tool_search_paths",
    "PlatformBuilder",
    "PlatformBuildResult",
    "build_platforms",
    "build_platforms_list",
    "select_swift_toolchain",
    "AppleTools",
    "CxxToolSet",
    "PlatformDescriptor",
    "platform_flavor",
    "replace_invalid_characters",
    "CompilerType",
    "DebugPathSanitizer",
    "MungingDebugPathSanitizer",
    "PrefixMapDebugPathSanitizer",
    "SwiftPlatform",
    "build_swift_platform",
]
