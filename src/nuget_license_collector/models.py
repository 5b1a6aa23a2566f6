"""Core data models for nuget_license_collector.

This module defines the fundamental data structures used throughout the
license collection pipeline, including package identifiers, registry
version records, fetch results, and the per-package license records that
are handed to the reporters.
"""

from dataclasses import asdict, dataclass
from typing import Optional


class LicenseType:
    """Fixed ``license_type`` values used on :class:`PackageLicenseRecord`.

    SPDX-declared packages carry the raw expression instead of one of
    these values.
    """

    FILE = "File"
    EXTERNAL = "External"
    NOT_SPECIFIED = "Not specified"
    ERROR = "Error"
    PACKAGE_NOT_FOUND = "Package not found"
    METADATA_FAILED = "Failed to retrieve metadata"


UNKNOWN = "Unknown"
LICENSE_NOT_SPECIFIED_TEXT = "License not specified"


@dataclass(frozen=True)
class PackageIdentifier:
    """Immutable reference to a NuGet package requested by the caller.

    Frozen for hashability so identifiers can be collected in sets.

    Attributes:
        name: Package id (e.g., "Newtonsoft.Json").
        version: Requested version string, or None for "latest".
    """

    name: str
    version: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "PackageIdentifier":
        """Build an identifier from its ``"Name"`` or ``"Name/Version"`` form.

        Args:
            value: Identifier string.

        Returns:
            Parsed PackageIdentifier.
        """
        name, _, version = value.strip().partition("/")
        return cls(name=name.strip(), version=version.strip() or None)

    def __str__(self) -> str:
        if self.version:
            return f"{self.name}/{self.version}"
        return self.name


@dataclass(frozen=True)
class VersionRecord:
    """One version of a package as described by the registry.

    Attributes:
        package_id: Package id with the registry's casing.
        version: Version string exactly as published.
        authors: Comma-separated author list, if any.
        project_url: Project homepage, if any.
        license_expression: SPDX license expression, if declared.
        license_file: Name of a license file embedded in the package, if declared.
        license_url: Legacy or supplementary license URL, if any.
        listed: False for unlisted versions.
    """

    package_id: str
    version: str
    authors: Optional[str] = None
    project_url: Optional[str] = None
    license_expression: Optional[str] = None
    license_file: Optional[str] = None
    license_url: Optional[str] = None
    listed: bool = True


@dataclass(frozen=True)
class FetchResult:
    """Outcome of downloading canonical license text.

    Attributes:
        text: Downloaded text, or the fallback message when ``ok`` is False.
        ok: True if the text came from a successful download.
    """

    text: str
    ok: bool


@dataclass(frozen=True)
class PackageLicenseRecord:
    """Resolved license information for one requested package.

    Records are created once by the resolver and never modified.

    Attributes:
        name: Package id (registry casing when the package was found).
        version: Resolved version; may differ from the requested one.
        author: Package authors, "Unknown" when absent.
        project_url: Project URL, empty when absent.
        license_type: SPDX expression, or one of the LicenseType values
            (or "Error: <message>").
        license_url: License URL when the package declares one.
        license_text: Human-readable license body.
    """

    name: str
    version: str
    author: str = UNKNOWN
    project_url: str = ""
    license_type: str = ""
    license_url: Optional[str] = None
    license_text: str = ""

    @classmethod
    def metadata_failed(cls, identifier: PackageIdentifier) -> "PackageLicenseRecord":
        """Record for a package whose registry metadata could not be fetched."""
        return cls(
            name=identifier.name,
            version=identifier.version or UNKNOWN,
            license_type=LicenseType.METADATA_FAILED,
        )

    @classmethod
    def not_found(cls, identifier: PackageIdentifier) -> "PackageLicenseRecord":
        """Record for a package the registry has no versions for."""
        return cls(
            name=identifier.name,
            version=identifier.version or "Not found",
            license_type=LicenseType.PACKAGE_NOT_FOUND,
        )

    @classmethod
    def error(
        cls, identifier: PackageIdentifier, message: str
    ) -> "PackageLicenseRecord":
        """Record for a package whose processing raised unexpectedly."""
        return cls(
            name=identifier.name,
            version=identifier.version or UNKNOWN,
            license_type=f"Error: {message}",
        )

    def to_dict(self) -> dict:
        """Return the record as a JSON-serializable dictionary."""
        return asdict(self)
