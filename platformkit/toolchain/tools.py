"""
Resolved tool values handed to the build execution layer.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class VersionedTool:
    """
    An executable together with the version fingerprint of its installation.

    Attributes:
        path: Absolute path to the executable
        name: Stable tool name (e.g., 'apple-clang')
        version: Composite version of the SDK and toolchains it came from
        extra_args: Arguments always passed before caller arguments
    """

    path: Path
    name: str
    version: str
    extra_args: Tuple[str, ...] = field(default_factory=tuple)

    def command_prefix(self) -> List[str]:
        """Get the executable followed by its fixed arguments."""
        return [str(self.path), *self.extra_args]

    def with_extra_args(self, args: Sequence[str]) -> "VersionedTool":
        """Return a copy with additional fixed arguments appended."""
        return replace(self, extra_args=self.extra_args + tuple(args))

    def __str__(self) -> str:
        return f"{self.name} {self.version} at {self.path}"
