"""License resolvers and their collaborators.

This module provides the NuGet registry client, the license content
fetcher, and the package license resolver that combines them with the
license text cache.
"""

from nuget_license_collector.resolvers.base import LicenseContentSource, RegistryClient
from nuget_license_collector.resolvers.content import ContentFetcher
from nuget_license_collector.resolvers.nuget import NuGetRegistryClient
from nuget_license_collector.resolvers.package import PackageLicenseResolver

__all__ = [
    "ContentFetcher",
    "LicenseContentSource",
    "NuGetRegistryClient",
    "PackageLicenseResolver",
    "RegistryClient",
]
