"""
Build every platform of an installation.

Runs discovery once, then assembles each (SDK, architecture) pair on a thread
pool. A pair that fails with a ConfigurationError is recorded and skipped; the
remaining pairs are unaffected. The result is ordered by flavor whatever order
the workers finish in.

Usage:
    from platformkit.platforms.builder import build_platforms

    result = build_platforms(config, Path.cwd())
    for platform in result.platforms:
        print(platform.flavor)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config.parser import PlatformConfig
from ..core.exceptions import ConfigurationError
from ..core.plist import PropertyListReader
from ..discovery.models import Sdk, SdkPaths, Toolchain
from ..discovery.sdks import SdkDiscovery
from ..discovery.toolchains import ToolchainDiscovery
from ..toolchain.finder import ToolResolver
from ..toolchain.versions import BuildVersionCache, VersionResolver
from .assembler import PlatformAssembler
from .descriptor import PlatformDescriptor, platform_flavor

logger = logging.getLogger(__name__)


@dataclass
class PlatformBuildResult:
    """
    Outcome of building all platforms.

    Attributes:
        platforms: Assembled descriptors, sorted by flavor
        errors: Flavor to the error that aborted its assembly
    """

    platforms: List[PlatformDescriptor] = field(default_factory=list)
    errors: Dict[str, ConfigurationError] = field(default_factory=dict)

    @property
    def flavors(self) -> List[str]:
        return [p.flavor for p in self.platforms]

    def get(self, flavor: str) -> Optional[PlatformDescriptor]:
        """Get a platform by flavor, or None."""
        for platform in self.platforms:
            if platform.flavor == flavor:
                return platform
        return None


def select_swift_toolchain(
    config: PlatformConfig, toolchains: Dict[str, Toolchain]
) -> Optional[Toolchain]:
    """
    Find the toolchain pinned by the configured Swift version.

    Returns:
        The pinned toolchain, or None if no version is configured or no
        discovered toolchain matches
    """
    identifier = config.swift_toolchain_identifier
    if identifier is None:
        return None

    toolchain = toolchains.get(identifier)
    if toolchain is None:
        logger.warning(
            f"Swift version {config.swift_version} requested but toolchain "
            f"{identifier} was not found"
        )
    return toolchain


class PlatformBuilder:
    """Discover an installation and assemble all of its platforms."""

    def __init__(
        self,
        config: PlatformConfig,
        project_root: Path,
        cache: Optional[BuildVersionCache] = None,
        reader: Optional[PropertyListReader] = None,
        resolver: Optional[ToolResolver] = None,
        max_workers: Optional[int] = None,
    ):
        self.config = config
        self.project_root = Path(project_root)
        self.cache = cache if cache is not None else BuildVersionCache()
        self.reader = reader or PropertyListReader()
        self.resolver = resolver or ToolResolver()
        self.max_workers = max_workers

    def build(self) -> PlatformBuildResult:
        """
        Build all platforms.

        Returns:
            PlatformBuildResult; empty when no developer directory is
            configured or it is not a directory
        """
        developer_dir = self.config.developer_dir
        if developer_dir is None:
            logger.info("No developer directory configured; no platforms available")
            return PlatformBuildResult()

        if not developer_dir.is_dir():
            logger.error(
                f"Developer directory is set to {developer_dir}, but is not a directory"
            )
            return PlatformBuildResult()

        toolchains = ToolchainDiscovery(self.reader).discover(
            developer_dir, self.config.extra_toolchain_paths
        )
        sdks = SdkDiscovery(self.reader).discover(
            developer_dir, self.config.extra_platform_paths, toolchains
        )
        if not sdks:
            logger.warning(f"No SDKs found under {developer_dir}")
            return PlatformBuildResult()

        swift_toolchain = select_swift_toolchain(self.config, toolchains)
        return self.assemble_all(sdks, swift_toolchain)

    def assemble_all(
        self,
        sdks: Dict[Sdk, SdkPaths],
        swift_toolchain: Optional[Toolchain] = None,
    ) -> PlatformBuildResult:
        """
        Assemble every (SDK, architecture) pair concurrently.

        Args:
            sdks: Discovered SDKs and their paths
            swift_toolchain: Toolchain pinned for Swift, if any

        Returns:
            PlatformBuildResult ordered by flavor
        """
        assembler = PlatformAssembler(
            self.config,
            self.project_root,
            resolver=self.resolver,
            version_resolver=VersionResolver(self.cache),
            reader=self.reader,
        )

        jobs: List[Tuple[Sdk, SdkPaths, str]] = []
        seen = set()
        for sdk, sdk_paths in sdks.items():
            for architecture in sdk.architectures:
                flavor = platform_flavor(sdk.name, architecture)
                if flavor in seen:
                    logger.warning(
                        f"Skipping {sdk.name} {architecture}: flavor {flavor} "
                        f"already taken"
                    )
                    continue
                seen.add(flavor)
                jobs.append((sdk, sdk_paths, architecture))

        result = PlatformBuildResult()
        if not jobs:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(
                    assembler.assemble, sdk, sdk_paths, architecture, swift_toolchain
                ): platform_flavor(sdk.name, architecture)
                for sdk, sdk_paths, architecture in jobs
            }
            for future in as_completed(futures):
                flavor = futures[future]
                try:
                    result.platforms.append(future.result())
                except ConfigurationError as e:
                    logger.warning(f"Skipping platform {flavor}: {e}")
                    result.errors[flavor] = e
                except Exception:
                    logger.exception(f"Unexpected error assembling platform {flavor}")
                    raise

        result.platforms.sort(key=lambda p: p.flavor)
        result.errors = dict(sorted(result.errors.items()))
        logger.info(
            f"Built {len(result.platforms)} platform(s), {len(result.errors)} failed"
        )
        return result


def build_platforms(
    config: PlatformConfig,
    project_root: Path,
    cache: Optional[BuildVersionCache] = None,
    max_workers: Optional[int] = None,
) -> PlatformBuildResult:
    """
    Convenience function to build all platforms of the configured installation.

    Args:
        config: Platform configuration
        project_root: Root of the project being built
        cache: Build version memo to share, or None for a fresh one
        max_workers: Thread pool size (None: executor default)

    Returns:
        PlatformBuildResult with platforms sorted by flavor
    """
    return PlatformBuilder(
        config, project_root, cache=cache, max_workers=max_workers
    ).build()


def build_platforms_list(
    config: PlatformConfig, project_root: Path
) -> List[PlatformDescriptor]:
    """Build all platforms and return only the successful descriptors."""
    return build_platforms(config, project_root).platforms
