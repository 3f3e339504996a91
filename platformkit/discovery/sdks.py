"""
SDK discovery.

Scans platform bundles for SDK bundles, reads each SDK's settings and links it
to the toolchains it builds with.

Layout:
    <developer_dir>/Platforms/<Name>.platform/Developer/SDKs/<name>.sdk/SDKSettings.plist
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from packaging.version import InvalidVersion, Version

from ..core.filesystem import iter_bundles
from ..core.plist import PropertyListReader
from .models import ApplePlatform, Sdk, SdkPaths, Toolchain

logger = logging.getLogger(__name__)

PLATFORMS_DIR = "Platforms"
PLATFORM_SUFFIX = ".platform"
SDK_SUFFIX = ".sdk"
SDKS_SUBDIR = Path("Developer") / "SDKs"
SDK_SETTINGS_FILE = "SDKSettings.plist"


class SdkDiscovery:
    """Find SDK bundles and build their Sdk and SdkPaths descriptions."""

    def __init__(self, reader: Optional[PropertyListReader] = None):
        self.reader = reader or PropertyListReader()

    def discover(
        self,
        developer_dir: Optional[Path],
        extra_platform_paths: Iterable[Path],
        toolchains: Dict[str, Toolchain],
    ) -> Dict[Sdk, SdkPaths]:
        """
        Discover SDKs.

        SDKs are keyed by name. Extra platform paths take precedence over the
        developer directory, and earlier extra paths over later ones.

        Args:
            developer_dir: Installation developer directory, or None
            extra_platform_paths: Directories containing platform bundles
            toolchains: Discovered toolchains by identifier

        Returns:
            Map of Sdk to SdkPaths, ordered by platform kind, version and name
        """
        directories: List[Path] = [Path(p) for p in extra_platform_paths]
        if developer_dir is not None:
            directories.append(Path(developer_dir) / PLATFORMS_DIR)

        found: Dict[str, Tuple[Sdk, SdkPaths]] = {}
        for directory in directories:
            logger.debug(f"Searching for platforms in {directory}")
            for platform_path in iter_bundles(directory, PLATFORM_SUFFIX):
                for sdk_path in iter_bundles(platform_path / SDKS_SUBDIR, SDK_SUFFIX):
                    entry = self._read_sdk(
                        sdk_path, platform_path, developer_dir, toolchains
                    )
                    if entry is None:
                        continue
                    sdk = entry[0]
                    if sdk.name in found:
                        logger.debug(
                            f"Ignoring {sdk_path}: {sdk.name} already provided by "
                            f"{found[sdk.name][1].sdk_path}"
                        )
                        continue
                    found[sdk.name] = entry

        ordered = sorted(found.values(), key=lambda entry: _sdk_sort_key(entry[0]))
        logger.info(f"Discovered {len(ordered)} SDK(s)")
        return dict(ordered)

    def _read_sdk(
        self,
        sdk_path: Path,
        platform_path: Path,
        developer_dir: Optional[Path],
        toolchains: Dict[str, Toolchain],
    ) -> Optional[Tuple[Sdk, SdkPaths]]:
        settings = self.reader.read(sdk_path / SDK_SETTINGS_FILE)
        if settings is None:
            logger.warning(f"Skipping SDK {sdk_path}: settings unreadable")
            return None

        name = settings.get("CanonicalName")
        version = settings.get("Version")
        if not isinstance(name, str) or not isinstance(version, str):
            logger.warning(f"Skipping SDK {sdk_path}: missing CanonicalName or Version")
            return None

        platform_name = _nested(settings, "DefaultProperties", "PLATFORM_NAME")
        platform = (
            ApplePlatform.from_name(platform_name)
            if isinstance(platform_name, str)
            else None
        )
        if platform is None:
            logger.warning(
                f"Skipping SDK {sdk_path}: unknown platform {platform_name!r}"
            )
            return None

        architectures = self._architectures(settings, platform)
        sdk_toolchains = self._associate_toolchains(
            name, settings.get("Toolchains"), toolchains
        )

        sdk = Sdk(
            name=name,
            version=version,
            platform=platform,
            architectures=architectures,
            toolchains=sdk_toolchains,
        )
        paths = SdkPaths(
            sdk_path=sdk_path,
            platform_path=platform_path,
            developer_path=Path(developer_dir) if developer_dir is not None else None,
            toolchain_paths=tuple(t.path for t in sdk_toolchains),
        )
        logger.debug(f"Found SDK {sdk} at {sdk_path}")
        return sdk, paths

    def _architectures(
        self, settings: Dict[str, Any], platform: ApplePlatform
    ) -> Tuple[str, ...]:
        archs = _nested(settings, "SupportedTargets", platform.value, "Archs")
        if isinstance(archs, list) and archs and all(isinstance(a, str) for a in archs):
            return tuple(archs)
        return platform.architectures

    def _associate_toolchains(
        self,
        sdk_name: str,
        requested: Any,
        toolchains: Dict[str, Toolchain],
    ) -> Tuple[Toolchain, ...]:
        """
        Resolve the toolchains an SDK names.

        An SDK that names no toolchains builds with every discovered toolchain.
        """
        if not isinstance(requested, list) or not requested:
            return tuple(toolchains[key] for key in sorted(toolchains))

        result = []
        for identifier in requested:
            toolchain = toolchains.get(identifier) if isinstance(identifier, str) else None
            if toolchain is None:
                logger.warning(f"SDK {sdk_name} requests unknown toolchain {identifier}")
                continue
            result.append(toolchain)
        return tuple(result)


def _nested(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _sdk_sort_key(sdk: Sdk):
    try:
        version_key: Tuple = (0, Version(sdk.version), "")
    except InvalidVersion:
        version_key = (1, Version("0"), sdk.version)
    return (sdk.platform.sort_order, version_key, sdk.name)


def discover_sdks(
    developer_dir: Optional[Path],
    extra_platform_paths: Iterable[Path],
    toolchains: Dict[str, Toolchain],
    reader: Optional[PropertyListReader] = None,
) -> Dict[Sdk, SdkPaths]:
    """Convenience function to discover SDKs."""
    return SdkDiscovery(reader).discover(developer_dir, extra_platform_paths, toolchains)
