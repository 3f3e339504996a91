"""
Property list reading for installation metadata.

Version and settings files are small property lists (XML or binary). They are
cosmetic or secondary: a missing, malformed or unexpected file is reported as an
absent value plus a warning so it never blocks platform assembly.

Usage:
    from platformkit.core.plist import PropertyListReader

    reader = PropertyListReader()
    build = reader.read_field(platform_dir / "version.plist", "ProductBuildVersion")
"""

import logging
import plistlib
from pathlib import Path
from typing import Any, Dict, Optional
from xml.parsers.expat import ExpatError

logger = logging.getLogger(__name__)


class PropertyListReader:
    """Tolerant reader for property list documents."""

    def read(self, path: Path) -> Optional[Dict[str, Any]]:
        """
        Parse a property list whose root is a dictionary.

        Args:
            path: Path to the property list

        Returns:
            Parsed dictionary, or None if the file is missing, unreadable,
            malformed or not a dictionary
        """
        try:
            with open(path, "rb") as f:
                data = plistlib.load(f)
        except FileNotFoundError:
            logger.warning(f"{path} does not exist")
            return None
        except (
            plistlib.InvalidFileException,
            ExpatError,
            ValueError,
            AttributeError,
            TypeError,
            OverflowError,
        ) as e:
            # Malformed <date> values surface as AttributeError from plistlib.
            logger.warning(f"Failed to parse {path}: {e}")
            return None
        except OSError as e:
            logger.warning(f"Error reading {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(
                f"Unexpected root in {path}: expected dictionary, "
                f"got {type(data).__name__}"
            )
            return None

        return data

    def read_nested(self, path: Path, *keys: str) -> Optional[Any]:
        """
        Read a value nested under a chain of dictionary keys.

        Args:
            path: Path to the property list
            *keys: Keys to follow from the root dictionary

        Returns:
            The value, or None if the file or any key along the chain is absent
        """
        data: Any = self.read(path)
        if data is None:
            return None

        for key in keys:
            if not isinstance(data, dict) or key not in data:
                logger.warning(f"In {path}, missing {'.'.join(keys)}")
                return None
            data = data[key]

        return data

    def read_field(self, path: Path, field_name: str) -> Optional[str]:
        """
        Read a top-level string field.

        Args:
            path: Path to the property list
            field_name: Key in the root dictionary

        Returns:
            Field value, or None if absent or not a string
        """
        value = self.read_nested(path, field_name)
        if value is None:
            return None

        if not isinstance(value, str):
            logger.warning(
                f"In {path}, {field_name} is a {type(value).__name__}, expected string"
            )
            return None

        return value
