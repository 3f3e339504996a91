"""Synthetic developer installations for testing.

This module provides helpers and pytest fixtures that lay out a developer
installation on disk without requiring real SDKs or compilers:

    Xcode.app/Contents/
        Info.plist, version.plist
        Developer/
            usr/bin/<tools>
            Toolchains/XcodeDefault.xctoolchain/ToolchainInfo.plist
            Platforms/<Name>.platform/
                version.plist
                Developer/SDKs/<name>.sdk/SDKSettings.plist
"""

import plistlib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

REQUIRED_TOOLS = [
    "clang",
    "clang++",
    "ar",
    "ranlib",
    "strip",
    "nm",
    "actool",
    "ibtool",
    "momc",
    "xctest",
    "dsymutil",
    "lipo",
    "lldb",
]

DEFAULT_TOOLCHAIN_ID = "com.apple.dt.toolchain.XcodeDefault"


def make_executable(path: Path) -> Path:
    """Create an executable stub script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/bin/sh\necho {path.name} mock\n")
    path.chmod(0o755)
    return path


def make_tools(directory: Path, names: Iterable[str]) -> List[Path]:
    """Create executable stubs for every name in a directory."""
    return [make_executable(directory / name) for name in names]


def write_plist(path: Path, data: dict) -> Path:
    """Write an XML property list."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        plistlib.dump(data, f)
    return path


def make_toolchain(
    toolchains_dir: Path,
    name: str,
    identifier: str,
    version: Optional[str] = None,
    info_file: str = "ToolchainInfo.plist",
) -> Path:
    """Create a toolchain bundle and return its path."""
    bundle = toolchains_dir / f"{name}.xctoolchain"
    info: Dict[str, str] = {"Identifier": identifier}
    if version is not None:
        info["DTSDKBuild"] = version
    write_plist(bundle / info_file, info)
    (bundle / "usr" / "bin").mkdir(parents=True, exist_ok=True)
    return bundle


def make_sdk(
    platforms_dir: Path,
    platform_bundle: str,
    sdk_name: str,
    version: str,
    platform_name: str,
    archs: Optional[List[str]] = None,
    toolchains: Optional[List[str]] = None,
    platform_build_version: Optional[str] = None,
) -> Path:
    """Create an SDK inside a platform bundle and return the SDK path."""
    platform_path = platforms_dir / f"{platform_bundle}.platform"
    sdk_path = platform_path / "Developer" / "SDKs" / f"{sdk_name}.sdk"

    settings: dict = {
        "CanonicalName": sdk_name,
        "Version": version,
        "DefaultProperties": {"PLATFORM_NAME": platform_name},
    }
    if archs is not None:
        settings["SupportedTargets"] = {platform_name: {"Archs": archs}}
    if toolchains is not None:
        settings["Toolchains"] = toolchains
    write_plist(sdk_path / "SDKSettings.plist", settings)

    if platform_build_version is not None:
        write_plist(
            platform_path / "version.plist",
            {"ProductBuildVersion": platform_build_version},
        )
    return sdk_path


@dataclass
class Installation:
    """Paths of a synthetic installation."""

    contents: Path
    developer_dir: Path
    toolchains_dir: Path
    platforms_dir: Path
    default_toolchain: Path

    @property
    def bin_dir(self) -> Path:
        return self.developer_dir / "usr" / "bin"


def make_installation(
    root: Path,
    toolchain_version: Optional[str] = None,
    build_version: Optional[str] = "8A218a",
    installation_version: Optional[str] = "0800",
    tools: Iterable[str] = REQUIRED_TOOLS,
) -> Installation:
    """Create an installation with one default toolchain and no SDKs."""
    contents = root / "Xcode.app" / "Contents"
    developer_dir = contents / "Developer"
    toolchains_dir = developer_dir / "Toolchains"
    platforms_dir = developer_dir / "Platforms"

    make_tools(developer_dir / "usr" / "bin", tools)
    default_toolchain = make_toolchain(
        toolchains_dir, "XcodeDefault", DEFAULT_TOOLCHAIN_ID, toolchain_version
    )
    platforms_dir.mkdir(parents=True, exist_ok=True)

    if build_version is not None:
        write_plist(contents / "version.plist", {"ProductBuildVersion": build_version})
    if installation_version is not None:
        write_plist(contents / "Info.plist", {"DTXcode": installation_version})

    return Installation(
        contents=contents,
        developer_dir=developer_dir,
        toolchains_dir=toolchains_dir,
        platforms_dir=platforms_dir,
        default_toolchain=default_toolchain,
    )


@pytest.fixture
def mock_installation(tmp_path) -> Installation:
    """
    Create a synthetic installation with a phone and a watch SDK.

    Contains:
    - one toolchain without a version
    - iphoneos10.0 (arm64 only) and watchos3.0 (armv7 only)
    - installation build version 8A218a

    Example:
        def test_discovery(mock_installation):
            assert (mock_installation.developer_dir / "Platforms").is_dir()
    """
    installation = make_installation(tmp_path)
    make_sdk(
        installation.platforms_dir,
        "iPhoneOS",
        "iphoneos10.0",
        "10.0",
        "iphoneos",
        archs=["arm64"],
        platform_build_version="14A345",
    )
    make_sdk(
        installation.platforms_dir,
        "WatchOS",
        "watchos3.0",
        "3.0",
        "watchos",
        archs=["armv7"],
        platform_build_version="14S326",
    )
    return installation


@pytest.fixture
def project_root(tmp_path) -> Path:
    """Create an empty project root directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root
