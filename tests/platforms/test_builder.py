"""
Tests for platformkit.platforms.builder module.
"""

import logging
import sys

import pytest

from platformkit.config.parser import PlatformConfig
from platformkit.core.exceptions import ToolNotFoundError, VersionResolutionError
from platformkit.discovery.models import Toolchain
from platformkit.platforms.assembler import PlatformAssembler
from platformkit.platforms.builder import (
    PlatformBuilder,
    build_platforms,
    build_platforms_list,
    select_swift_toolchain,
)
from platformkit.toolchain.versions import BuildVersionCache
from tests.fixtures.installations import (
    DEFAULT_TOOLCHAIN_ID,
    REQUIRED_TOOLS,
    make_executable,
    make_installation,
    make_sdk,
    make_toolchain,
)

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="Executable bits are POSIX specific"
)


class TestBuildPlatforms:
    """End-to-end tests for building all platforms."""

    def test_mock_installation(self, platform_config, project_root):
        """Test that every (SDK, architecture) pair yields one descriptor."""
        result = build_platforms(platform_config, project_root)

        assert result.flavors == ["iphoneos10.0-arm64", "watchos3.0-armv7"]
        assert result.errors == {}

        phone = result.get("iphoneos10.0-arm64")
        assert phone.version == "10.0:8A218a"
        assert "-fembed-bitcode" not in phone.cflags

        watch = result.get("watchos3.0-armv7")
        assert "-fembed-bitcode" in watch.cflags
        for flag in ("-bitcode_verify", "-bitcode_hide_symbols", "-bitcode_symbol_map"):
            assert flag in watch.ldflags
        assert watch.build_version == "14S326"

    def test_get_unknown_flavor(self, platform_config, project_root):
        assert build_platforms(platform_config, project_root).get("macosx10.12-x86_64") is None

    def test_build_platforms_list(self, platform_config, project_root):
        platforms = build_platforms_list(platform_config, project_root)

        assert [p.flavor for p in platforms] == ["iphoneos10.0-arm64", "watchos3.0-armv7"]

    def test_no_developer_dir(self, project_root, caplog):
        """Test that an unset developer directory yields no platforms."""
        with caplog.at_level(logging.INFO):
            result = build_platforms(PlatformConfig(), project_root)

        assert result.platforms == []
        assert result.errors == {}
        assert "No developer directory configured" in caplog.text

    def test_developer_dir_not_a_directory(self, tmp_path, project_root, caplog):
        not_a_dir = tmp_path / "Developer"
        not_a_dir.write_text("")

        with caplog.at_level(logging.ERROR):
            result = build_platforms(PlatformConfig(developer_dir=not_a_dir), project_root)

        assert result.platforms == []
        assert "is not a directory" in caplog.text

    def test_no_sdks(self, tmp_path, project_root, caplog):
        installation = make_installation(tmp_path)

        with caplog.at_level(logging.WARNING):
            result = build_platforms(
                PlatformConfig(developer_dir=installation.developer_dir), project_root
            )

        assert result.platforms == []
        assert "No SDKs found" in caplog.text

    def test_sorted_by_flavor(self, tmp_path, project_root):
        """Test that output order follows flavors, not discovery."""
        installation = make_installation(tmp_path)
        make_sdk(installation.platforms_dir, "MacOSX", "macosx10.12", "10.12", "macosx")
        make_sdk(installation.platforms_dir, "iPhoneOS", "iphoneos10.0", "10.0", "iphoneos")

        result = build_platforms(
            PlatformConfig(developer_dir=installation.developer_dir),
            project_root,
            max_workers=4,
        )

        assert result.flavors == [
            "iphoneos10.0-arm64",
            "iphoneos10.0-armv7",
            "macosx10.12-i386",
            "macosx10.12-x86_64",
        ]

    def test_missing_tool_isolated(self, tmp_path, project_root, caplog):
        """Test that a pair missing a tool does not affect the others."""
        tools = [t for t in REQUIRED_TOOLS if t != "lipo"]
        installation = make_installation(tmp_path, tools=tools)
        phone_sdk = make_sdk(
            installation.platforms_dir, "iPhoneOS", "iphoneos10.0", "10.0", "iphoneos",
            archs=["arm64"],
        )
        make_executable(phone_sdk / "usr" / "bin" / "lipo")
        make_sdk(
            installation.platforms_dir, "WatchOS", "watchos3.0", "3.0", "watchos",
            archs=["armv7k"],
        )

        with caplog.at_level(logging.WARNING):
            result = build_platforms(
                PlatformConfig(developer_dir=installation.developer_dir), project_root
            )

        assert result.flavors == ["iphoneos10.0-arm64"]
        assert list(result.errors) == ["watchos3.0-armv7k"]
        assert isinstance(result.errors["watchos3.0-armv7k"], ToolNotFoundError)
        assert "Skipping platform watchos3.0-armv7k" in caplog.text

    def test_version_failure_isolated(self, tmp_path, project_root):
        """Test that an SDK without versions fails alone."""
        installation = make_installation(tmp_path, build_version=None)
        make_toolchain(installation.toolchains_dir, "Versioned", "com.example.versioned", "V1")
        make_sdk(
            installation.platforms_dir, "iPhoneOS", "iphoneos10.0", "10.0", "iphoneos",
            archs=["arm64"], toolchains=["com.example.versioned"],
        )
        make_sdk(
            installation.platforms_dir, "WatchOS", "watchos3.0", "3.0", "watchos",
            toolchains=[DEFAULT_TOOLCHAIN_ID],
        )

        result = build_platforms(
            PlatformConfig(developer_dir=installation.developer_dir), project_root
        )

        assert result.flavors == ["iphoneos10.0-arm64"]
        assert result.get("iphoneos10.0-arm64").version == "10.0:V1"
        assert isinstance(result.errors["watchos3.0-armv7k"], VersionResolutionError)

    def test_duplicate_flavor_skipped(self, tmp_path, project_root, caplog):
        """Test that SDK names colliding after character replacement are skipped."""
        installation = make_installation(tmp_path)
        make_sdk(
            installation.platforms_dir, "iPhoneOS", "iphoneos10.0 beta", "10.0", "iphoneos",
            archs=["arm64"],
        )
        make_sdk(
            installation.platforms_dir, "iPhoneOS", "iphoneos10.0_beta", "10.0", "iphoneos",
            archs=["arm64"],
        )

        with caplog.at_level(logging.WARNING):
            result = build_platforms(
                PlatformConfig(developer_dir=installation.developer_dir), project_root
            )

        assert result.flavors == ["iphoneos10.0_beta-arm64"]
        assert result.platforms[0].sdk.name == "iphoneos10.0 beta"
        assert "already taken" in caplog.text

    def test_shared_cache(self, platform_config, project_root, mock_installation):
        """Test that the build version is read once per developer directory."""
        cache = BuildVersionCache()

        build_platforms(platform_config, project_root, cache=cache)
        build_platforms(platform_config, project_root, cache=cache)

        assert len(cache) == 1
        assert mock_installation.developer_dir in cache

    def test_extra_platform_paths(self, tmp_path, mock_installation, project_root):
        extra = tmp_path / "extra-platforms"
        make_sdk(extra, "MacOSX", "macosx10.12", "10.12", "macosx", archs=["x86_64"])
        config = PlatformConfig(
            developer_dir=mock_installation.developer_dir,
            extra_platform_paths=[extra],
        )

        result = build_platforms(config, project_root)

        assert "macosx10.12-x86_64" in result.flavors
        mac = result.get("macosx10.12-x86_64")
        assert mac.sdk_paths.platform_path == extra / "MacOSX.platform"


class TestSwiftToolchainSelection:
    """Tests for pinning the Swift toolchain."""

    def test_not_configured(self, tmp_path):
        toolchains = {"a": Toolchain("a", tmp_path)}

        assert select_swift_toolchain(PlatformConfig(), toolchains) is None

    def test_found(self, tmp_path):
        toolchain = Toolchain("com.apple.dt.toolchain.Swift_2_3", tmp_path, "2.3")

        selected = select_swift_toolchain(
            PlatformConfig(swift_version="2.3"), {toolchain.identifier: toolchain}
        )

        assert selected is toolchain

    def test_missing_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            selected = select_swift_toolchain(PlatformConfig(swift_version="3.0"), {})

        assert selected is None
        assert "com.apple.dt.toolchain.Swift_3_0" in caplog.text

    def test_pinned_toolchain_used(self, mock_installation, project_root):
        """Test that builds use the pinned Swift toolchain's tools."""
        swift_bundle = make_toolchain(
            mock_installation.toolchains_dir,
            "Swift_2_3",
            "com.apple.dt.toolchain.Swift_2_3",
            "2.3",
        )
        make_executable(swift_bundle / "usr" / "bin" / "swiftc")
        make_executable(swift_bundle / "usr" / "bin" / "swift-stdlib-tool")
        config = PlatformConfig(
            developer_dir=mock_installation.developer_dir, swift_version="2.3"
        )

        builder = PlatformBuilder(config, project_root, max_workers=2)
        result = builder.build()

        phone = result.get("iphoneos10.0-arm64")
        assert phone.swift_platform.toolchain_paths == (swift_bundle,)
        assert phone.version == "10.0:2.3"


class TestFailureContainment:
    """Tests that one pair's failure does not leak into the others."""

    def test_malformed_platform_metadata(self, mock_installation, platform_config, project_root):
        """Test that an unparseable platform version.plist only drops metadata."""
        version_plist = mock_installation.platforms_dir / "iPhoneOS.platform" / "version.plist"
        version_plist.write_text(
            "<?xml version='1.0'?><plist version='1.0'><dict>"
            "<key>ProductBuildVersion</key><string>14A345</string>"
            "<key>Built</key><date>not-a-date</date>"
            "</dict></plist>"
        )

        result = build_platforms(platform_config, project_root)

        assert result.flavors == ["iphoneos10.0-arm64", "watchos3.0-armv7"]
        assert result.errors == {}
        assert result.get("iphoneos10.0-arm64").build_version is None
        assert result.get("watchos3.0-armv7").build_version == "14S326"

    def test_unexpected_error_logged_with_flavor(
        self, platform_config, project_root, monkeypatch, caplog
    ):
        """Test that an unexpected error names the failing flavor before propagating."""
        original = PlatformAssembler.assemble

        def assemble(self, sdk, sdk_paths, architecture, swift_toolchain=None):
            if sdk.name == "watchos3.0":
                raise RuntimeError("boom")
            return original(self, sdk, sdk_paths, architecture, swift_toolchain)

        monkeypatch.setattr(PlatformAssembler, "assemble", assemble)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError, match="boom"):
                build_platforms(platform_config, project_root)

        assert "Unexpected error assembling platform watchos3.0-armv7" in caplog.text
