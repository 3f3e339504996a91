"""
Composite version computation.

The composite version distinguishes otherwise identical platform
configurations. It is the SDK version followed by the version of every
toolchain the SDK builds with, or by the installation build version when no
toolchain declares one:

    10.0:802.0.42          (toolchain version)
    10.0:8A218a            (installation build version fallback)
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..core.exceptions import VersionResolutionError
from ..core.plist import PropertyListReader
from ..discovery.models import Sdk

logger = logging.getLogger(__name__)

VERSION_DELIMITER = ":"
VERSION_PLIST = "version.plist"
BUILD_VERSION_FIELD = "ProductBuildVersion"

BuildVersionReader = Callable[[Path], Optional[str]]


def read_installation_build_version(
    developer_dir: Path, reader: Optional[PropertyListReader] = None
) -> Optional[str]:
    """
    Read the build version of the installation owning a developer directory.

    The value lives in the 'version.plist' next to the developer directory,
    i.e. in the top-level bundle's Contents directory.

    Args:
        developer_dir: Developer directory (e.g., Xcode.app/Contents/Developer)
        reader: Property list reader to use

    Returns:
        Build version (e.g., '8A218a'), or None if unavailable
    """
    reader = reader or PropertyListReader()
    version_plist = Path(developer_dir).parent / VERSION_PLIST
    return reader.read_field(version_plist, BUILD_VERSION_FIELD)


class BuildVersionCache:
    """
    Memo of installation build versions keyed by developer directory.

    Lookups follow read-miss-compute-store without locking. Two threads missing
    the same key both read the same file and store the same value, which keeps
    the result idempotent. Absent values are cached as well.
    """

    def __init__(self, reader: Optional[BuildVersionReader] = None):
        self._reader = reader or read_installation_build_version
        self._cache: Dict[Path, Optional[str]] = {}

    def lookup(self, developer_dir: Path) -> Optional[str]:
        """Get the build version for a developer directory."""
        key = Path(developer_dir)
        if key in self._cache:
            return self._cache[key]

        value = self._reader(key)
        self._cache[key] = value
        logger.debug(f"Installation build version for {key}: {value or '<absent>'}")
        return value

    def __contains__(self, developer_dir: Path) -> bool:
        return Path(developer_dir) in self._cache

    def __len__(self) -> int:
        return len(self._cache)


class VersionResolver:
    """Compute composite versions for SDKs."""

    def __init__(self, cache: Optional[BuildVersionCache] = None):
        self.cache = cache if cache is not None else BuildVersionCache()

    def resolve(self, sdk: Sdk, developer_dir: Optional[Path]) -> str:
        """
        Compute the composite version of an SDK.

        Args:
            sdk: SDK to fingerprint
            developer_dir: Developer directory for the build version fallback

        Returns:
            ':'-joined version string

        Raises:
            VersionResolutionError: If no toolchain declares a version and no
                build version is available
        """
        parts: List[str] = [sdk.version]

        toolchain_versions = [t.version for t in sdk.toolchains if t.version]
        if toolchain_versions:
            parts.extend(toolchain_versions)
        else:
            build_version = self.build_version(developer_dir)
            if not build_version:
                raise VersionResolutionError(sdk.name)
            parts.append(build_version)

        return VERSION_DELIMITER.join(parts)

    def build_version(self, developer_dir: Optional[Path]) -> Optional[str]:
        """Get the memoized installation build version, if any."""
        if developer_dir is None:
            return None
        return self.cache.lookup(developer_dir)
