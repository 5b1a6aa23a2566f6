"""NuGet License Collector - license texts for the NuGet packages of a .NET build.

This package provides tools for discovering the NuGet packages used by a
solution or project, resolving their licenses on nuget.org, and writing
the license texts to a report.
"""

__version__ = "0.1.0"

from nuget_license_collector.models import (
    FetchResult,
    LicenseType,
    PackageIdentifier,
    PackageLicenseRecord,
    VersionRecord,
)

__all__ = [
    "__version__",
    "FetchResult",
    "LicenseType",
    "PackageIdentifier",
    "PackageLicenseRecord",
    "VersionRecord",
]
