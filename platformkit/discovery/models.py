"""
Discovery data model.

Toolchains, SDKs and their on-disk locations as found in a developer
installation. All values are immutable so they can be shared across worker
threads and used as dictionary keys.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple


class ApplePlatform(Enum):
    """Platform kinds an SDK can target."""

    IPHONEOS = "iphoneos"
    IPHONESIMULATOR = "iphonesimulator"
    WATCHOS = "watchos"
    WATCHSIMULATOR = "watchsimulator"
    APPLETVOS = "appletvos"
    APPLETVSIMULATOR = "appletvsimulator"
    MACOSX = "macosx"

    @classmethod
    def from_name(cls, name: str) -> Optional["ApplePlatform"]:
        """Look up a platform by its lowercase name, or None if unknown."""
        try:
            return cls(name.lower())
        except ValueError:
            return None

    @property
    def traits(self) -> "PlatformTraits":
        return _PLATFORM_TRAITS[self]

    @property
    def min_version_flag_prefix(self) -> str:
        return self.traits.min_version_flag_prefix

    @property
    def architectures(self) -> Tuple[str, ...]:
        return self.traits.architectures

    @property
    def swift_name(self) -> str:
        return self.traits.swift_name or self.value

    @property
    def stub_binary_path(self) -> Optional[Path]:
        return self.traits.stub_binary_path

    @property
    def requires_bitcode(self) -> bool:
        return self.traits.requires_bitcode

    @property
    def sort_order(self) -> int:
        return list(ApplePlatform).index(self)


@dataclass(frozen=True)
class PlatformTraits:
    """
    Static properties of a platform kind.

    Attributes:
        architectures: Architectures assumed when the SDK does not list any
        min_version_flag_prefix: Compiler flag prefix for the deployment target
        swift_name: OS component of the Swift target triple (None: platform name)
        stub_binary_path: SDK-relative launcher stub for app extensions
        requires_bitcode: Whether objects must embed bitcode
    """

    architectures: Tuple[str, ...]
    min_version_flag_prefix: str
    swift_name: Optional[str] = None
    stub_binary_path: Optional[Path] = None
    requires_bitcode: bool = False


WATCH_KIT_STUB = Path("Library/Application Support/WatchKit/WK")

_PLATFORM_TRAITS: Dict[ApplePlatform, PlatformTraits] = {
    ApplePlatform.IPHONEOS: PlatformTraits(
        architectures=("armv7", "arm64"),
        min_version_flag_prefix="-mios-version-min=",
        swift_name="ios",
    ),
    ApplePlatform.IPHONESIMULATOR: PlatformTraits(
        architectures=("i386", "x86_64"),
        min_version_flag_prefix="-mios-simulator-version-min=",
        swift_name="ios",
    ),
    ApplePlatform.WATCHOS: PlatformTraits(
        architectures=("armv7k",),
        min_version_flag_prefix="-mwatchos-version-min=",
        stub_binary_path=WATCH_KIT_STUB,
        requires_bitcode=True,
    ),
    ApplePlatform.WATCHSIMULATOR: PlatformTraits(
        architectures=("i386",),
        min_version_flag_prefix="-mwatchos-simulator-version-min=",
        swift_name="watchos",
        stub_binary_path=WATCH_KIT_STUB,
    ),
    ApplePlatform.APPLETVOS: PlatformTraits(
        architectures=("arm64",),
        min_version_flag_prefix="-mtvos-version-min=",
        swift_name="tvos",
    ),
    ApplePlatform.APPLETVSIMULATOR: PlatformTraits(
        architectures=("x86_64",),
        min_version_flag_prefix="-mtvos-simulator-version-min=",
        swift_name="tvos",
    ),
    ApplePlatform.MACOSX: PlatformTraits(
        architectures=("i386", "x86_64"),
        min_version_flag_prefix="-mmacosx-version-min=",
    ),
}


@dataclass(frozen=True)
class Toolchain:
    """
    A toolchain bundle (compiler and binutils executables).

    Attributes:
        identifier: Reverse-DNS identifier (e.g., 'com.apple.dt.toolchain.XcodeDefault')
        path: Bundle directory
        version: Build version declared by the bundle, if any
    """

    identifier: str
    path: Path
    version: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.identifier} ({self.version or 'unversioned'}) at {self.path}"


@dataclass(frozen=True)
class Sdk:
    """An SDK for one platform kind, with the toolchains it builds with."""

    name: str
    version: str
    platform: ApplePlatform
    architectures: Tuple[str, ...]
    toolchains: Tuple[Toolchain, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{self.name} ({self.platform.value} {self.version})"


@dataclass(frozen=True)
class SdkPaths:
    """
    Filesystem locations backing an SDK.

    Attributes:
        sdk_path: The '.sdk' bundle directory
        platform_path: The '.platform' bundle containing the SDK
        developer_path: Installation developer directory, if known
        toolchain_paths: Bundle directories of the SDK's toolchains, in order
    """

    sdk_path: Path
    platform_path: Path
    developer_path: Optional[Path] = None
    toolchain_paths: Tuple[Path, ...] = field(default_factory=tuple)
