"""
Debug path sanitization.

Compilers embed absolute paths (working directory, SDK headers, toolchain
headers) into debug info. Replacing installation-specific prefixes with
symbolic placeholders makes two builds on different machines produce identical
output. Two strategies share one replacement table:

- PrefixMapDebugPathSanitizer asks the compiler to rewrite paths while it emits
  debug records (-fdebug-prefix-map).
- MungingDebugPathSanitizer rewrites raw output text, padding the working
  directory to a fixed width so byte offsets stay valid. It serves tools such
  as the assembler that have no prefix-map support.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..core.exceptions import SanitizerMappingError

PathMapping = Union[Dict[Path, Path], Iterable[Tuple[Path, Path]]]


class CompilerType(Enum):
    """Compiler families with distinct debug record handling."""

    CLANG = "clang"
    GCC = "gcc"


def build_replacement_table(paths: PathMapping) -> Dict[Path, Path]:
    """
    Build a one-to-one table of absolute paths to placeholders.

    Args:
        paths: Mapping or (path, placeholder) pairs, in priority order

    Returns:
        Ordered dictionary of path to placeholder

    Raises:
        SanitizerMappingError: If a path or a placeholder appears twice
    """
    pairs = list(paths.items()) if isinstance(paths, dict) else list(paths)
    table: Dict[Path, Path] = {}
    seen_placeholders = set()
    for path, placeholder in pairs:
        path, placeholder = Path(path), Path(placeholder)
        if path in table:
            raise SanitizerMappingError(f"Path mapped twice for sanitization: {path}")
        if placeholder in seen_placeholders:
            raise SanitizerMappingError(
                f"Placeholder {placeholder} used for more than one path"
            )
        table[path] = placeholder
        seen_placeholders.add(placeholder)
    return table


class DebugPathSanitizer(ABC):
    """
    Base class for debug path sanitizers.

    Attributes:
        path_size: Width the compilation directory is padded to
        separator: Path separator used for padding
        compilation_directory: Placeholder for the working directory
        other_paths: Path to placeholder table
    """

    def __init__(
        self,
        path_size: int,
        separator: str,
        compilation_directory: Path,
        other_paths: PathMapping,
    ):
        self.path_size = path_size
        self.separator = separator
        self.compilation_directory = Path(compilation_directory)
        self.other_paths = build_replacement_table(other_paths)

    def expanded_path(self, path: Path) -> str:
        """
        Pad a path with separators to the fixed width.

        Raises:
            ValueError: If the path is longer than the fixed width
        """
        text = str(path)
        if len(text) > self.path_size:
            raise ValueError(
                f"Path {text} is longer than the sanitizer limit of {self.path_size}"
            )
        return text + self.separator * (self.path_size - len(text))

    def _ordered_replacements(self) -> List[Tuple[str, str]]:
        # Longest first so nested paths are replaced before their parents.
        return sorted(
            ((str(k), str(v)) for k, v in self.other_paths.items()),
            key=lambda item: len(item[0]),
            reverse=True,
        )

    @abstractmethod
    def compilation_flags(self, working_dir: Optional[Path] = None) -> List[str]:
        """Get compiler flags that enable sanitization."""

    @abstractmethod
    def compilation_environment(
        self, working_dir: Path, should_sanitize: bool
    ) -> Dict[str, str]:
        """Get environment variables for the compiler process."""

    @abstractmethod
    def sanitize(self, working_dir: Optional[Path], contents: str) -> str:
        """Replace absolute paths in text with their placeholders."""


class PrefixMapDebugPathSanitizer(DebugPathSanitizer):
    """Sanitizer that lets the compiler rewrite paths as it writes debug info."""

    def __init__(
        self,
        path_size: int,
        separator: str,
        compilation_directory: Path,
        other_paths: PathMapping,
        project_root: Path,
        compiler_type: CompilerType = CompilerType.CLANG,
    ):
        super().__init__(path_size, separator, compilation_directory, other_paths)
        self.project_root = Path(project_root)
        self.compiler_type = compiler_type

    def compilation_flags(self, working_dir: Optional[Path] = None) -> List[str]:
        root = Path(working_dir) if working_dir is not None else self.project_root
        flags = []
        if self.compiler_type == CompilerType.GCC:
            # gcc otherwise records the prefix maps in DW_AT_producer.
            flags.append("-gno-record-gcc-switches")
        flags.append(f"-fdebug-prefix-map={root}={self.compilation_directory}")
        for path, placeholder in self._ordered_replacements():
            flags.append(f"-fdebug-prefix-map={path}={placeholder}")
        return flags

    def compilation_environment(
        self, working_dir: Path, should_sanitize: bool
    ) -> Dict[str, str]:
        return {"PWD": str(working_dir)}

    def sanitize(self, working_dir: Optional[Path], contents: str) -> str:
        for path, placeholder in self._ordered_replacements():
            contents = contents.replace(path, placeholder)
        if working_dir is not None:
            contents = contents.replace(
                str(working_dir), str(self.compilation_directory)
            )
        return contents


class MungingDebugPathSanitizer(DebugPathSanitizer):
    """Sanitizer that rewrites raw output text after the fact."""

    def compilation_flags(self, working_dir: Optional[Path] = None) -> List[str]:
        return []

    def compilation_environment(
        self, working_dir: Path, should_sanitize: bool
    ) -> Dict[str, str]:
        # Padded so the placeholder fits where the working directory was recorded.
        if should_sanitize:
            return {"PWD": self.expanded_path(working_dir)}
        return {"PWD": str(working_dir)}

    def sanitize(self, working_dir: Optional[Path], contents: str) -> str:
        if working_dir is not None:
            contents = contents.replace(
                self.expanded_path(working_dir),
                self.expanded_path(self.compilation_directory),
            )
        for path, placeholder in self._ordered_replacements():
            contents = contents.replace(path, placeholder)
        return contents

    def sanitize_bytes(self, working_dir: Optional[Path], contents: bytes) -> bytes:
        """Byte-level variant of sanitize() for object file contents."""
        if working_dir is not None:
            contents = contents.replace(
                self.expanded_path(working_dir).encode(),
                self.expanded_path(self.compilation_directory).encode(),
            )
        for path, placeholder in self._ordered_replacements():
            contents = contents.replace(path.encode(), placeholder.encode())
        return contents

    def restore_compilation_directory(self, contents: bytes, working_dir: Path) -> bytes:
        """Undo working directory sanitization in already sanitized bytes."""
        return contents.replace(
            self.expanded_path(self.compilation_directory).encode(),
            self.expanded_path(working_dir).encode(),
        )
