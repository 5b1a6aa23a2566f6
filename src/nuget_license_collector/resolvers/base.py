"""Base interfaces for the collaborators of the package license resolver.

The resolver depends only on these contracts, so tests and alternative
implementations can be passed in through its constructor.
"""

from abc import ABC, abstractmethod

from nuget_license_collector.models import FetchResult, VersionRecord


class RegistryClient(ABC):
    """Abstract base class for package registry clients."""

    @abstractmethod
    async def query_versions(
        self,
        package_name: str,
        include_prerelease: bool = True,
        include_unlisted: bool = True,
    ) -> list[VersionRecord]:
        """Fetch every known version record of a package.

        Args:
            package_name: Package id.
            include_prerelease: Include pre-release versions.
            include_unlisted: Include unlisted versions.

        Returns:
            Version records; empty if the package does not exist.

        Raises:
            RegistryError: If the registry could not be queried.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the registry name for logging/debugging."""
        ...


class LicenseContentSource(ABC):
    """Abstract base class for downloading license texts and documents."""

    @abstractmethod
    async def fetch_license_text(self, license_id: str) -> FetchResult:
        """Download the canonical text of a license identifier.

        Never raises; failures are reported through ``FetchResult.ok``.
        """
        ...

    @abstractmethod
    async def fetch_content(self, url: str) -> str:
        """Download a document as plain text.

        Never raises; returns an empty string when nothing usable was found.
        """
        ...
