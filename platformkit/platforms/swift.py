"""
Swift support for platforms.

A Swift platform needs both the compiler driver and the runtime library
packaging tool. When either is missing the platform is built without Swift.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..discovery.models import SdkPaths
from ..toolchain.finder import ToolResolver
from ..toolchain.tools import VersionedTool

logger = logging.getLogger(__name__)

SWIFTC = "swiftc"
SWIFT_STDLIB_TOOL = "swift-stdlib-tool"


@dataclass(frozen=True)
class SwiftPlatform:
    """
    Swift compiler and runtime configuration for one platform.

    Attributes:
        name: Platform name (e.g., 'iphoneos')
        swiftc: Compiler driver, with frontend arguments
        swift_stdlib_tool: Runtime packaging tool, with copy arguments
        toolchain_paths: Toolchain bundles providing Swift
        runtime_paths: Dynamic runtime library directories
        static_runtime_paths: Static runtime library directories
    """

    name: str
    swiftc: VersionedTool
    swift_stdlib_tool: VersionedTool
    toolchain_paths: Tuple[Path, ...] = field(default_factory=tuple)
    runtime_paths: Tuple[Path, ...] = field(default_factory=tuple)
    static_runtime_paths: Tuple[Path, ...] = field(default_factory=tuple)


def swift_target_triple(architecture: str, swift_name: str, min_version: str) -> str:
    """
    Build the Swift target triple.

    Example:
        >>> swift_target_triple("arm64", "ios", "9.0")
        'arm64-apple-ios9.0'
    """
    return f"{architecture}-apple-{swift_name}{min_version}"


def build_swift_platform(
    platform_name: str,
    target_triple: str,
    version: str,
    sdk_paths: SdkPaths,
    search_paths: Sequence[Path],
    resolver: Optional[ToolResolver] = None,
) -> Optional[SwiftPlatform]:
    """
    Resolve Swift tools for a platform.

    Args:
        platform_name: Platform name passed to the stdlib tool
        target_triple: Swift target triple
        version: Composite version for the tools
        sdk_paths: SDK paths; toolchain_paths select the Swift toolchains
        search_paths: Tool search directories, in precedence order
        resolver: Tool resolver to use

    Returns:
        SwiftPlatform, or None unless both Swift tools are found
    """
    resolver = resolver or ToolResolver()

    swiftc_args = ["-frontend", "-sdk", str(sdk_paths.sdk_path), "-target", target_triple]

    stdlib_args: List[str] = [
        "--copy",
        "--verbose",
        "--strip-bitcode",
        "--platform",
        platform_name,
    ]
    for toolchain_path in sdk_paths.toolchain_paths:
        stdlib_args.extend(["--toolchain", str(toolchain_path)])

    swiftc = resolver.optional_tool(
        SWIFTC, search_paths, version, swiftc_args, warn=False
    )
    stdlib_tool = resolver.optional_tool(
        SWIFT_STDLIB_TOOL, search_paths, version, stdlib_args, warn=False
    )

    if swiftc is None or stdlib_tool is None:
        logger.debug(f"Swift unavailable for {platform_name} ({target_triple})")
        return None

    toolchain_paths = tuple(sdk_paths.toolchain_paths)
    return SwiftPlatform(
        name=platform_name,
        swiftc=swiftc,
        swift_stdlib_tool=stdlib_tool,
        toolchain_paths=toolchain_paths,
        runtime_paths=tuple(
            p / "usr" / "lib" / "swift" / platform_name for p in toolchain_paths
        ),
        static_runtime_paths=tuple(
            p / "usr" / "lib" / "swift_static" / platform_name for p in toolchain_paths
        ),
    )
