"""Dependency scanners for .NET solutions and projects.

This module provides scanners for extracting NuGet package identifiers
from solution and project files.
"""

import logging
from pathlib import Path

from nuget_license_collector.errors import ScannerError
from nuget_license_collector.scanners.base import BaseScanner
from nuget_license_collector.scanners.project import ProjectScanner
from nuget_license_collector.scanners.solution import SolutionScanner

__all__ = [
    "BaseScanner",
    "ProjectScanner",
    "SolutionScanner",
    "discover_packages",
    "get_scanner",
]

logger = logging.getLogger(__name__)

_SCANNERS: list[type[BaseScanner]] = [
    SolutionScanner,
    ProjectScanner,
]


def get_scanner(path: Path) -> BaseScanner:
    """Get the appropriate scanner for a given file path.

    Args:
        path: Path to a solution or project file.

    Returns:
        Scanner instance configured for the given file.

    Raises:
        ScannerError: If no scanner can handle the given file.
    """
    for scanner_cls in _SCANNERS:
        if scanner_cls.can_handle(path):
            return scanner_cls(path)

    raise ScannerError(
        f"No scanner available for '{path.name}'. "
        f"Supported files: *.sln, *.slnx, *.csproj, *.vbproj, *.fsproj"
    )


def discover_packages(path: Path) -> list[str]:
    """Collect the distinct package identifiers of a solution or project.

    Args:
        path: Path to a solution or project file.

    Returns:
        Sorted, de-duplicated "Name/Version" strings ("Name" when the
        version is unknown).

    Raises:
        ScannerError: If the file is unsupported, missing or malformed.
    """
    scanner = get_scanner(path)
    logger.debug("Using %s scanner for %s", scanner.source_name, path)
    return sorted({str(identifier) for identifier in scanner.scan()})
