"""
Platform descriptors.

A PlatformDescriptor is the frozen result of assembling one (SDK, architecture)
pair. Rule definitions select descriptors by flavor, and the execution layer
reads tools and flags from them. Nothing mutates a descriptor after assembly.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..discovery.models import Sdk, SdkPaths
from ..toolchain.tools import VersionedTool
from .sanitizer import MungingDebugPathSanitizer, PrefixMapDebugPathSanitizer
from .swift import SwiftPlatform

_INVALID_FLAVOR_CHARACTERS = re.compile(r"[^-a-zA-Z0-9_.]")
FLAVOR_SUBSTITUTE = "_"


def replace_invalid_characters(name: str) -> str:
    """
    Make a string usable as a flavor by replacing disallowed characters.

    Example:
        >>> replace_invalid_characters("iphoneos10.0 beta,arm64")
        'iphoneos10.0_beta_arm64'
    """
    return _INVALID_FLAVOR_CHARACTERS.sub(FLAVOR_SUBSTITUTE, name)


def platform_flavor(sdk_name: str, architecture: str) -> str:
    """
    Get the flavor identifier of an (SDK, architecture) pair.

    Example:
        >>> platform_flavor("iphoneos10.0", "arm64")
        'iphoneos10.0-arm64'
    """
    return replace_invalid_characters(f"{sdk_name}-{architecture}")


def frozen_mapping(values: Mapping[str, str]) -> Mapping[str, str]:
    """Get a read-only copy of a mapping."""
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class CxxToolSet:
    """
    C-family tools of a platform.

    The C driver serves as compiler, preprocessor and assembler; the C++
    driver also links.
    """

    cc: VersionedTool
    cxx: VersionedTool
    ar: VersionedTool
    ranlib: VersionedTool
    strip: VersionedTool
    nm: VersionedTool

    @property
    def cpp(self) -> VersionedTool:
        return self.cc

    @property
    def cxxpp(self) -> VersionedTool:
        return self.cxx

    @property
    def assembler(self) -> VersionedTool:
        return self.cc

    @property
    def ld(self) -> VersionedTool:
        return self.cxx


@dataclass(frozen=True)
class AppleTools:
    """Resource, packaging and debugging tools of a platform."""

    actool: VersionedTool
    ibtool: VersionedTool
    momc: VersionedTool
    xctest: VersionedTool
    dsymutil: VersionedTool
    lipo: VersionedTool
    lldb: VersionedTool
    codesign_allocate: Optional[VersionedTool] = None
    copy_scene_kit_assets: Optional[VersionedTool] = None


@dataclass(frozen=True)
class PlatformDescriptor:
    """
    Immutable configuration for building one SDK and architecture.

    Attributes:
        flavor: Unique flavor identifier
        description: Human readable summary
        sdk: The SDK this platform targets
        sdk_paths: Locations backing the SDK
        architecture: Target architecture
        min_version: Minimum OS version compiled for
        version: Composite version carried by every tool
        cxx_tools: Compiler, linker and binutils
        apple_tools: Resource and packaging tools
        cflags: Compiler flags, shared by the C++ compiler and the assembler
        ldflags: Linker flags, starting with the compiler flags
        macros: Substitutions available to rule definitions
        compiler_debug_path_sanitizer: Prefix-map sanitizer for compiler output
        assembler_debug_path_sanitizer: Text munging sanitizer for assembler output
        header_whitelist: Regexes of header paths exempt from verification
        swift_platform: Swift support, if its tools were found
        stub_binary: Launcher stub for app extensions, if the platform has one
        build_version: Platform build version, if readable
        installation_version: Installation marketing version, if readable
    """

    flavor: str
    description: str
    sdk: Sdk
    sdk_paths: SdkPaths
    architecture: str
    min_version: str
    version: str
    cxx_tools: CxxToolSet
    apple_tools: AppleTools
    cflags: Tuple[str, ...]
    ldflags: Tuple[str, ...]
    macros: Mapping[str, str]
    compiler_debug_path_sanitizer: PrefixMapDebugPathSanitizer
    assembler_debug_path_sanitizer: MungingDebugPathSanitizer
    header_whitelist: Tuple[str, ...] = field(default_factory=tuple)
    swift_platform: Optional[SwiftPlatform] = None
    stub_binary: Optional[Path] = None
    build_version: Optional[str] = None
    installation_version: Optional[str] = None

    shared_library_extension: str = "dylib"
    shared_library_versioned_extension_format: str = "%s.dylib"
    static_library_extension: str = "a"
    object_file_extension: str = "o"

    @property
    def cxxflags(self) -> Tuple[str, ...]:
        return self.cflags

    @property
    def asflags(self) -> Tuple[str, ...]:
        return self.cflags

    @property
    def cppflags(self) -> Tuple[str, ...]:
        return ()

    @property
    def cxxppflags(self) -> Tuple[str, ...]:
        return ()

    @property
    def asppflags(self) -> Tuple[str, ...]:
        return ()

    @property
    def codesign_allocate(self) -> Optional[VersionedTool]:
        return self.apple_tools.codesign_allocate

    def __str__(self) -> str:
        return f"{self.flavor} ({self.description})"
