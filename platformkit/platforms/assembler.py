"""
Platform assembly.

Turns one (SDK, architecture) pair into a PlatformDescriptor. Assembly is a
fixed pipeline of steps; each step receives the partial state built so far and
returns a new partial state, and the last step freezes it into a descriptor:

    search paths -> minimum version -> compiler flags -> linker flags
    -> composite version -> tools -> debug path sanitizers -> macros
    -> metadata -> header whitelist -> Swift -> descriptor

Usage:
    assembler = PlatformAssembler(config, project_root)
    descriptor = assembler.assemble(sdk, sdk_paths, "arm64")
"""

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config.parser import PlatformConfig
from ..core.filesystem import real_path
from ..core.plist import PropertyListReader
from ..discovery.models import Sdk, SdkPaths, Toolchain
from ..toolchain.finder import ToolResolver
from ..toolchain.tools import VersionedTool
from ..toolchain.versions import VERSION_PLIST, BUILD_VERSION_FIELD, VersionResolver
from .descriptor import (
    AppleTools,
    CxxToolSet,
    PlatformDescriptor,
    frozen_mapping,
    platform_flavor,
)
from .sanitizer import (
    CompilerType,
    MungingDebugPathSanitizer,
    PrefixMapDebugPathSanitizer,
)
from .swift import SwiftPlatform, build_swift_platform, swift_target_triple

logger = logging.getLogger(__name__)

USR_BIN = Path("usr") / "bin"
DEVELOPER = "Developer"
TOOLS = "Tools"
INSTALLATION_INFO_PLIST = "Info.plist"
INSTALLATION_VERSION_FIELD = "DTXcode"

SDKROOT_PLACEHOLDER = Path("APPLE_SDKROOT")
PLATFORM_DIR_PLACEHOLDER = Path("APPLE_PLATFORM_DIR")
DEVELOPER_DIR_PLACEHOLDER = Path("APPLE_DEVELOPER_DIR")

BITCODE_COMPILER_FLAGS = ("-fembed-bitcode",)
BITCODE_LINKER_FLAGS = ("-bitcode_verify", "-bitcode_hide_symbols", "-bitcode_symbol_map")

# (executable, tool name) of tools every platform must have.
CXX_TOOLS = {
    "cc": ("clang", "apple-clang"),
    "cxx": ("clang++", "apple-clang++"),
    "ar": ("ar", "apple-ar"),
    "ranlib": ("ranlib", "apple-ranlib"),
    "strip": ("strip", "apple-strip"),
    "nm": ("nm", "apple-nm"),
}
APPLE_TOOLS = {
    "actool": ("actool", "apple-actool"),
    "ibtool": ("ibtool", "apple-ibtool"),
    "momc": ("momc", "apple-momc"),
    "xctest": ("xctest", "apple-xctest"),
    "dsymutil": ("dsymutil", "apple-dsymutil"),
    "lipo": ("lipo", "apple-lipo"),
    "lldb": ("lldb", "lldb"),
}
OPTIONAL_APPLE_TOOLS = {
    "codesign_allocate": "codesign_allocate",
    "copy_scene_kit_assets": "copySceneKitAssets",
}


def ixlinker(*args: str) -> List[str]:
    """
    Wrap linker arguments for passing through the compiler driver.

    Example:
        >>> ixlinker("-sdk_version", "10.0")
        ['-Xlinker', '-sdk_version', '-Xlinker', '10.0']
    """
    flags = []
    for arg in args:
        flags.extend(["-Xlinker", arg])
    return flags


def tool_search_paths(sdk_paths: SdkPaths) -> Tuple[Path, ...]:
    """
    Get tool search directories, most specific first.

    Order: SDK bin, SDK developer bin, platform developer bin, each toolchain
    bin, installation developer bin and tools.
    """
    paths = [
        sdk_paths.sdk_path / USR_BIN,
        sdk_paths.sdk_path / DEVELOPER / USR_BIN,
        sdk_paths.platform_path / DEVELOPER / USR_BIN,
    ]
    paths.extend(toolchain_path / USR_BIN for toolchain_path in sdk_paths.toolchain_paths)
    if sdk_paths.developer_path is not None:
        paths.append(sdk_paths.developer_path / USR_BIN)
        paths.append(sdk_paths.developer_path / TOOLS)
    return tuple(paths)


@dataclass(frozen=True)
class _AssemblyState:
    """Partial platform built up by the assembly steps."""

    sdk: Sdk
    sdk_paths: SdkPaths
    architecture: str
    flavor: str
    swift_toolchain: Optional[Toolchain] = None
    search_paths: Tuple[Path, ...] = ()
    min_version: str = ""
    cflags: Tuple[str, ...] = ()
    linker_flags: Tuple[str, ...] = ()
    version: str = ""
    cxx_tools: Optional[CxxToolSet] = None
    apple_tools: Optional[AppleTools] = None
    compiler_sanitizer: Optional[PrefixMapDebugPathSanitizer] = None
    assembler_sanitizer: Optional[MungingDebugPathSanitizer] = None
    macros: Dict[str, str] = field(default_factory=dict)
    build_version: Optional[str] = None
    installation_version: Optional[str] = None
    header_whitelist: Tuple[str, ...] = ()
    swift_platform: Optional[SwiftPlatform] = None


_Step = Callable[[_AssemblyState], _AssemblyState]


class PlatformAssembler:
    """
    Assemble platform descriptors for (SDK, architecture) pairs.

    An assembler holds only read-only collaborators, so one instance may
    assemble several pairs concurrently. The build version memo inside the
    version resolver is the one shared mutable structure and tolerates racing
    lookups.
    """

    def __init__(
        self,
        config: PlatformConfig,
        project_root: Path,
        resolver: Optional[ToolResolver] = None,
        version_resolver: Optional[VersionResolver] = None,
        reader: Optional[PropertyListReader] = None,
    ):
        self.config = config
        self.project_root = Path(project_root)
        self.resolver = resolver or ToolResolver()
        self.version_resolver = version_resolver or VersionResolver()
        self.reader = reader or PropertyListReader()

    def assemble(
        self,
        sdk: Sdk,
        sdk_paths: SdkPaths,
        architecture: str,
        swift_toolchain: Optional[Toolchain] = None,
    ) -> PlatformDescriptor:
        """
        Assemble one platform.

        Args:
            sdk: Target SDK
            sdk_paths: Locations backing the SDK
            architecture: Target architecture
            swift_toolchain: Toolchain pinned for Swift, if configured

        Returns:
            Frozen platform descriptor

        Raises:
            ConfigurationError: If a required tool or the composite version
                cannot be resolved
        """
        state = _AssemblyState(
            sdk=sdk,
            sdk_paths=sdk_paths,
            architecture=architecture,
            flavor=platform_flavor(sdk.name, architecture),
            swift_toolchain=swift_toolchain,
        )
        for step in self._steps():
            state = step(state)

        descriptor = self._freeze(state)
        logger.debug(f"Assembled platform {descriptor}")
        return descriptor

    def _steps(self) -> Sequence[_Step]:
        return (
            self._with_search_paths,
            self._with_min_version,
            self._with_compiler_flags,
            self._with_linker_flags,
            self._with_version,
            self._with_tools,
            self._with_sanitizers,
            self._with_macros,
            self._with_metadata,
            self._with_header_whitelist,
            self._with_swift,
        )

    def _with_search_paths(self, state: _AssemblyState) -> _AssemblyState:
        return replace(state, search_paths=tool_search_paths(state.sdk_paths))

    def _with_min_version(self, state: _AssemblyState) -> _AssemblyState:
        min_version = self.config.target_sdk_version(state.sdk.platform)
        if min_version is None:
            min_version = state.sdk.version
        logger.debug(f"SDK {state.sdk} using minimum version {min_version}")
        return replace(state, min_version=min_version)

    def _with_compiler_flags(self, state: _AssemblyState) -> _AssemblyState:
        platform = state.sdk.platform
        cflags = [
            "-isysroot",
            str(state.sdk_paths.sdk_path),
            "-iquote",
            str(self.project_root),
            "-arch",
            state.architecture,
            f"{platform.min_version_flag_prefix}{state.min_version}",
        ]
        if platform.requires_bitcode:
            cflags.extend(BITCODE_COMPILER_FLAGS)
        return replace(state, cflags=tuple(cflags))

    def _with_linker_flags(self, state: _AssemblyState) -> _AssemblyState:
        flags = ixlinker("-sdk_version", state.sdk.version, "-ObjC")
        if state.sdk.platform.requires_bitcode:
            flags.extend(ixlinker(*BITCODE_LINKER_FLAGS))
        return replace(state, linker_flags=tuple(flags))

    def _with_version(self, state: _AssemblyState) -> _AssemblyState:
        version = self.version_resolver.resolve(
            state.sdk, state.sdk_paths.developer_path
        )
        return replace(state, version=version)

    def _with_tools(self, state: _AssemblyState) -> _AssemblyState:
        def required(entries: Dict[str, Tuple[str, str]]) -> Dict[str, VersionedTool]:
            return {
                field_name: self.resolver.required_tool(
                    executable, tool_name, state.search_paths, state.version
                )
                for field_name, (executable, tool_name) in entries.items()
            }

        cxx_tools = CxxToolSet(**required(CXX_TOOLS))
        apple_tools = required(APPLE_TOOLS)
        optional = {
            field_name: self.resolver.optional_tool(
                executable, state.search_paths, state.version
            )
            for field_name, executable in OPTIONAL_APPLE_TOOLS.items()
        }
        return replace(
            state,
            cxx_tools=cxx_tools,
            apple_tools=AppleTools(**apple_tools, **optional),
        )

    def _with_sanitizers(self, state: _AssemblyState) -> _AssemblyState:
        paths = state.sdk_paths
        replacements = [
            (paths.sdk_path, SDKROOT_PLACEHOLDER),
            (paths.platform_path, PLATFORM_DIR_PLACEHOLDER),
        ]
        if paths.developer_path is not None:
            replacements.append((paths.developer_path, DEVELOPER_DIR_PLACEHOLDER))

        limit = self.config.debug_path_sanitizer_limit
        compiler_sanitizer = PrefixMapDebugPathSanitizer(
            limit,
            os.sep,
            Path("."),
            replacements,
            self.project_root.absolute(),
            CompilerType.CLANG,
        )
        assembler_sanitizer = MungingDebugPathSanitizer(
            limit, os.sep, Path("."), replacements
        )
        return replace(
            state,
            compiler_sanitizer=compiler_sanitizer,
            assembler_sanitizer=assembler_sanitizer,
        )

    def _with_macros(self, state: _AssemblyState) -> _AssemblyState:
        paths = state.sdk_paths
        macros = {
            "SDKROOT": str(paths.sdk_path),
            "PLATFORM_DIR": str(paths.platform_path),
            "CURRENT_ARCH": state.architecture,
        }
        if paths.developer_path is not None:
            macros["DEVELOPER_DIR"] = str(paths.developer_path)
        return replace(state, macros=macros)

    def _with_metadata(self, state: _AssemblyState) -> _AssemblyState:
        build_version = self.reader.read_field(
            state.sdk_paths.platform_path / VERSION_PLIST, BUILD_VERSION_FIELD
        )
        if build_version is None:
            logger.warning(
                f"Build version will be unset for platform {state.flavor}"
            )

        installation_version = None
        developer_path = state.sdk_paths.developer_path
        if developer_path is not None:
            installation_version = self.reader.read_field(
                developer_path.parent / INSTALLATION_INFO_PLIST,
                INSTALLATION_VERSION_FIELD,
            )

        return replace(
            state,
            build_version=build_version,
            installation_version=installation_version,
        )

    def _with_header_whitelist(self, state: _AssemblyState) -> _AssemblyState:
        paths = state.sdk_paths
        whitelist = [
            _under(paths.sdk_path),
            _under(paths.platform_path / DEVELOPER / "Library" / "Frameworks"),
        ]
        for toolchain_path in paths.toolchain_paths:
            try:
                whitelist.append(_under(real_path(toolchain_path)))
            except OSError as e:
                logger.warning(
                    f"Toolchain path could not be resolved: {toolchain_path}: {e}"
                )
        return replace(state, header_whitelist=tuple(whitelist))

    def _with_swift(self, state: _AssemblyState) -> _AssemblyState:
        sdk_paths = state.sdk_paths
        search_paths = state.search_paths
        if state.swift_toolchain is not None:
            swift_path = state.swift_toolchain.path
            search_paths = (swift_path / USR_BIN,) + search_paths
            sdk_paths = replace(sdk_paths, toolchain_paths=(swift_path,))

        platform = state.sdk.platform
        swift_platform = build_swift_platform(
            platform.value,
            swift_target_triple(state.architecture, platform.swift_name, state.min_version),
            state.version,
            sdk_paths,
            search_paths,
            self.resolver,
        )
        return replace(state, swift_platform=swift_platform)

    def _freeze(self, state: _AssemblyState) -> PlatformDescriptor:
        stub_path = state.sdk.platform.stub_binary_path
        return PlatformDescriptor(
            flavor=state.flavor,
            description=f"SDK: {state.sdk.name}, architecture: {state.architecture}",
            sdk=state.sdk,
            sdk_paths=state.sdk_paths,
            architecture=state.architecture,
            min_version=state.min_version,
            version=state.version,
            cxx_tools=state.cxx_tools,
            apple_tools=state.apple_tools,
            cflags=state.cflags,
            ldflags=state.cflags + state.linker_flags,
            macros=frozen_mapping(state.macros),
            compiler_debug_path_sanitizer=state.compiler_sanitizer,
            assembler_debug_path_sanitizer=state.assembler_sanitizer,
            header_whitelist=state.header_whitelist,
            swift_platform=state.swift_platform,
            stub_binary=(
                state.sdk_paths.sdk_path / stub_path if stub_path is not None else None
            ),
            build_version=state.build_version,
            installation_version=state.installation_version,
        )


def _under(path: Path) -> str:
    """Regex matching any file below path."""
    return "^" + re.escape(str(path)) + r"\/.*"
