"""Base interface for dependency scanners.

Scanners extract NuGet package identifiers from solution and project
files without building or restoring them.
"""

import json
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from nuget_license_collector.errors import ScannerError
from nuget_license_collector.models import PackageIdentifier


def local_name(tag: str) -> str:
    """Strip the XML namespace from a tag name.

    Old-style MSBuild files put every element in the
    ``http://schemas.microsoft.com/developer/msbuild/2003`` namespace.
    """
    return tag.rsplit("}", 1)[-1]


def parse_xml(path: Path) -> ET.Element:
    """Parse an XML file and return its root element.

    Raises:
        ScannerError: If the file cannot be read or is not well-formed.
    """
    try:
        return ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise ScannerError(f"Invalid XML in {path}: {e}") from e


def read_json(path: Path) -> dict:
    """Read a JSON object from a file written by NuGet restore.

    Raises:
        ScannerError: If the file cannot be read or is not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ScannerError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ScannerError(f"Unexpected JSON document in {path}")
    return data


class BaseScanner(ABC):
    """Abstract base class for dependency scanners.

    Attributes:
        source_path: Optional path to the file being scanned.
    """

    def __init__(self, source_path: Optional[Path] = None) -> None:
        """Initialize the scanner.

        Args:
            source_path: Optional path to the solution or project file.
        """
        self.source_path = source_path

    def _require_source(self) -> Path:
        if self.source_path is None:
            raise ScannerError("source_path must be set before calling scan()")
        if not self.source_path.is_file():
            raise ScannerError(f"File not found: {self.source_path}")
        return self.source_path

    @abstractmethod
    def scan(self) -> list[PackageIdentifier]:
        """Scan the source and extract package identifiers.

        Returns:
            Package identifiers in discovery order (may contain duplicates).

        Raises:
            ScannerError: If the source file is missing or unreadable.
        """
        ...

    @classmethod
    @abstractmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if this scanner can handle the given file.

        Args:
            path: Path to check.

        Returns:
            True if this scanner can process the file, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source type.

        Returns:
            Name like "solution", "project", etc.
        """
        ...
