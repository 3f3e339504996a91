"""
Tool resolution across an ordered list of search directories.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..core.exceptions import ToolNotFoundError
from ..core.filesystem import find_executable_in
from .tools import VersionedTool

logger = logging.getLogger(__name__)


class ToolResolver:
    """
    Find executables by name in directories ordered most specific first.

    The first directory holding an executable match wins, so the result does
    not depend on directory listing order.
    """

    def find(self, name: str, search_paths: Sequence[Path]) -> Optional[Path]:
        """
        Find a tool.

        Args:
            name: Executable name
            search_paths: Directories to scan, in precedence order

        Returns:
            Path to the first executable match, or None
        """
        for directory in search_paths:
            path = find_executable_in(directory, name)
            if path is not None:
                logger.debug(f"Resolved {name} to {path}")
                return path
        return None

    def require(self, name: str, search_paths: Sequence[Path]) -> Path:
        """
        Find a tool that must exist.

        Raises:
            ToolNotFoundError: If no search directory contains the tool
        """
        path = self.find(name, search_paths)
        if path is None:
            raise ToolNotFoundError(name, search_paths)
        return path

    def required_tool(
        self,
        executable: str,
        tool_name: str,
        search_paths: Sequence[Path],
        version: str,
    ) -> VersionedTool:
        """
        Resolve a required tool as a VersionedTool.

        Args:
            executable: Executable file name to look for
            tool_name: Name recorded on the VersionedTool
            search_paths: Directories to scan, in precedence order
            version: Composite version to attach

        Raises:
            ToolNotFoundError: If the executable is not found
        """
        return VersionedTool(
            path=self.require(executable, search_paths),
            name=tool_name,
            version=version,
        )

    def optional_tool(
        self,
        executable: str,
        search_paths: Sequence[Path],
        version: str,
        extra_args: Sequence[str] = (),
        warn: bool = True,
    ) -> Optional[VersionedTool]:
        """
        Resolve an optional tool, named after its executable.

        A missing tool is logged as a warning and reported as None so the
        caller can disable whatever depends on it. Pass warn=False when
        absence is expected.
        """
        path = self.find(executable, search_paths)
        if path is None:
            if warn:
                logger.warning(f"Optional tool {executable} not found; feature disabled")
            else:
                logger.debug(f"Optional tool {executable} not found")
            return None

        return VersionedTool(path=path, name=executable, version=version).with_extra_args(
            extra_args
        )
