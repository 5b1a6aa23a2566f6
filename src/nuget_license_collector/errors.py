"""Exception types raised by nuget_license_collector."""

from typing import Optional


class CollectorError(Exception):
    """Base class for all errors raised by this package."""


class RegistryError(CollectorError):
    """The package registry could not be queried.

    Attributes:
        package_name: Package being queried, if known.
    """

    def __init__(self, message: str, package_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.package_name = package_name


class ScannerError(CollectorError):
    """A solution or project file could not be read or is unsupported."""
