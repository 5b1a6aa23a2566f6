"""NuGet registry client for fetching package version metadata.

This client reads the NuGet V3 service index, locates the SemVer 2.0
registration resource and returns every version of a package together
with its author, project URL and license declaration.
"""

import asyncio
import logging
import urllib.parse
from typing import Any, Optional

import aiohttp

from nuget_license_collector.errors import RegistryError
from nuget_license_collector.models import VersionRecord
from nuget_license_collector.resolvers.base import RegistryClient
from nuget_license_collector.resolvers.http import (
    DEFAULT_TIMEOUT_SECONDS,
    HttpClientBase,
)
from nuget_license_collector.versions import NuGetVersion

logger = logging.getLogger(__name__)

SERVICE_INDEX_URL = "https://api.nuget.org/v3/index.json"

# Registration hive that includes SemVer 2.0 (pre-release) versions
REGISTRATION_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/Versioned",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl",
)

HEADERS_JSON = {"Accept": "application/json"}


def _join_authors(authors: Any) -> Optional[str]:
    if isinstance(authors, list):
        joined = ", ".join(str(a).strip() for a in authors if str(a).strip())
        return joined or None
    if isinstance(authors, str) and authors.strip():
        return authors.strip()
    return None


def _non_empty(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class NuGetRegistryClient(HttpClientBase, RegistryClient):
    """Client for the NuGet V3 registration API.

    The service index is fetched once per client and the registration base
    URL is reused for every package. Registration pages that are not
    inlined in the registration index are fetched individually.

    Use as an async context manager or call close() when done.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        service_index_url: str = SERVICE_INDEX_URL,
    ) -> None:
        """Initialize the NuGet registry client.

        Args:
            session: Optional externally owned aiohttp session.
            timeout: Total timeout in seconds for each request.
            service_index_url: URL of the V3 service index.
        """
        super().__init__(session=session, timeout=timeout)
        self.service_index_url = service_index_url
        self._registration_base: Optional[str] = None

    @property
    def name(self) -> str:
        """Return the registry name.

        Returns:
            The string "NuGet".
        """
        return "NuGet"

    async def _get_json(self, url: str, package_name: str) -> Optional[dict]:
        """GET a JSON document.

        Returns:
            Parsed document, or None if the server answered 404.

        Raises:
            RegistryError: On network errors, other error statuses or
                invalid JSON.
        """
        logger.debug("Fetching NuGet metadata from %s", url)
        try:
            session = await self._get_session()
            async with session.get(url, headers=HEADERS_JSON) as response:
                if response.status == 404:
                    return None

                if response.status != 200:
                    raise RegistryError(
                        f"NuGet API returned status {response.status} for {url}",
                        package_name,
                    )

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise RegistryError(
                        f"Invalid JSON from {url}: {e}", package_name
                    ) from e

        except asyncio.TimeoutError as e:
            raise RegistryError(f"Timed out fetching {url}", package_name) from e
        except aiohttp.ClientError as e:
            raise RegistryError(
                f"Network error fetching {url}: {e}", package_name
            ) from e

        if not isinstance(data, dict):
            raise RegistryError(f"Unexpected JSON document from {url}", package_name)
        return data

    async def _get_registration_base(self, package_name: str) -> str:
        if self._registration_base is not None:
            return self._registration_base

        index = await self._get_json(self.service_index_url, package_name)
        if index is None:
            raise RegistryError(
                f"Service index not found at {self.service_index_url}", package_name
            )

        resources = {
            resource.get("@type"): resource.get("@id")
            for resource in index.get("resources", [])
            if isinstance(resource, dict)
        }
        for resource_type in REGISTRATION_TYPES:
            base_url = resources.get(resource_type)
            if base_url:
                if not base_url.endswith("/"):
                    base_url += "/"
                self._registration_base = base_url
                return base_url

        raise RegistryError(
            "Service index does not advertise a registration resource", package_name
        )

    async def _collect_leaves(self, registration: dict, package_name: str) -> list[dict]:
        leaves = []
        for page in registration.get("items", []):
            items = page.get("items")
            if items is None and page.get("@id"):
                page_data = await self._get_json(page["@id"], package_name)
                items = page_data.get("items", []) if page_data else []
            leaves.extend(items or [])
        return leaves

    def _parse_catalog_entry(self, entry: dict, package_name: str) -> Optional[VersionRecord]:
        version = _non_empty(entry.get("version"))
        if version is None:
            return None

        return VersionRecord(
            package_id=_non_empty(entry.get("id")) or package_name,
            version=version,
            authors=_join_authors(entry.get("authors")),
            project_url=_non_empty(entry.get("projectUrl")),
            license_expression=_non_empty(entry.get("licenseExpression")),
            license_file=_non_empty(entry.get("licenseFile")),
            license_url=_non_empty(entry.get("licenseUrl")),
            listed=entry.get("listed", True) is not False,
        )

    async def query_versions(
        self,
        package_name: str,
        include_prerelease: bool = True,
        include_unlisted: bool = True,
    ) -> list[VersionRecord]:
        """Fetch every version record of a package from NuGet.

        Args:
            package_name: Package id (case-insensitive).
            include_prerelease: Include pre-release versions.
            include_unlisted: Include unlisted versions.

        Returns:
            Version records in registry order; empty if the package does
            not exist.

        Raises:
            RegistryError: If the registry could not be queried.
        """
        base_url = await self._get_registration_base(package_name)
        encoded_id = urllib.parse.quote(package_name.lower(), safe="")
        registration = await self._get_json(
            f"{base_url}{encoded_id}/index.json", package_name
        )
        if registration is None:
            logger.debug("Package %s has no registration on NuGet", package_name)
            return []

        records = []
        for leaf in await self._collect_leaves(registration, package_name):
            entry = leaf.get("catalogEntry") if isinstance(leaf, dict) else None
            if not isinstance(entry, dict):
                continue

            record = self._parse_catalog_entry(entry, package_name)
            if record is None:
                continue
            if not include_unlisted and not record.listed:
                continue
            if not include_prerelease:
                parsed = NuGetVersion.parse(record.version)
                if parsed is not None and parsed.is_prerelease:
                    continue
            records.append(record)

        logger.debug("Found %d versions for %s", len(records), package_name)
        return records
