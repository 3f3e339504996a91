"""
Toolchain discovery.

Scans toolchain bundles under a developer directory and any configured extra
directories, producing an identifier to Toolchain map.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..core.filesystem import iter_bundles
from ..core.plist import PropertyListReader
from .models import Toolchain

logger = logging.getLogger(__name__)

TOOLCHAINS_DIR = "Toolchains"
TOOLCHAIN_SUFFIX = ".xctoolchain"
TOOLCHAIN_INFO_FILES = ("ToolchainInfo.plist", "Info.plist")
IDENTIFIER_KEYS = ("Identifier", "CFBundleIdentifier")
VERSION_KEYS = ("DTSDKBuild", "Version")


class ToolchainDiscovery:
    """Find toolchain bundles and read their identifiers and versions."""

    def __init__(self, reader: Optional[PropertyListReader] = None):
        self.reader = reader or PropertyListReader()

    def discover(
        self,
        developer_dir: Optional[Path],
        extra_toolchain_paths: Iterable[Path] = (),
    ) -> Dict[str, Toolchain]:
        """
        Discover toolchains.

        Extra paths take precedence over the developer directory, and earlier
        extra paths over later ones. Within one directory bundles are visited in
        name order and the first bundle claiming an identifier keeps it.

        Args:
            developer_dir: Installation developer directory, or None
            extra_toolchain_paths: Directories containing toolchain bundles

        Returns:
            Map of toolchain identifier to Toolchain, in identifier order
        """
        directories: List[Path] = [Path(p) for p in extra_toolchain_paths]
        if developer_dir is not None:
            directories.append(Path(developer_dir) / TOOLCHAINS_DIR)

        toolchains: Dict[str, Toolchain] = {}
        for directory in directories:
            logger.debug(f"Searching for toolchains in {directory}")
            for bundle in iter_bundles(directory, TOOLCHAIN_SUFFIX):
                toolchain = self._read_toolchain(bundle)
                if toolchain is None:
                    continue
                if toolchain.identifier in toolchains:
                    logger.debug(
                        f"Ignoring {bundle}: {toolchain.identifier} already provided "
                        f"by {toolchains[toolchain.identifier].path}"
                    )
                    continue
                toolchains[toolchain.identifier] = toolchain

        logger.info(f"Discovered {len(toolchains)} toolchain(s)")
        return dict(sorted(toolchains.items()))

    def _read_toolchain(self, bundle: Path) -> Optional[Toolchain]:
        """Build a Toolchain from a bundle's info plist, or None if unusable."""
        info = None
        for info_name in TOOLCHAIN_INFO_FILES:
            info_path = bundle / info_name
            if info_path.exists():
                info = self.reader.read(info_path)
                if info is not None:
                    break

        if info is None:
            logger.warning(f"Skipping toolchain {bundle}: no readable info plist")
            return None

        identifier = _first_string(info, IDENTIFIER_KEYS)
        if identifier is None:
            logger.warning(f"Skipping toolchain {bundle}: no identifier")
            return None

        version = _first_string(info, VERSION_KEYS)
        toolchain = Toolchain(identifier=identifier, path=bundle, version=version)
        logger.debug(f"Found toolchain {toolchain}")
        return toolchain


def _first_string(info: dict, keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = info.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def discover_toolchains(
    developer_dir: Optional[Path],
    extra_toolchain_paths: Iterable[Path] = (),
    reader: Optional[PropertyListReader] = None,
) -> Dict[str, Toolchain]:
    """
    Convenience function to discover toolchains.

    Example:
        >>> toolchains = discover_toolchains(Path('/Applications/Xcode.app/Contents/Developer'))
        >>> sorted(toolchains)
        ['com.apple.dt.toolchain.XcodeDefault']
    """
    return ToolchainDiscovery(reader).discover(developer_dir, extra_toolchain_paths)
