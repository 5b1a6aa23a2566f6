"""Package license resolver orchestrating registry, cache and fetcher.

For each requested package the resolver fetches the package's versions
from the registry (with retries), picks the requested version, and turns
the version's license declaration into a PackageLicenseRecord:

1. SPDX expression: canonical text of every identifier in the expression
2. Embedded license file: the file downloaded from the package content
3. License URL: the document behind the URL
4. Nothing declared: "Not specified"

Every requested package yields exactly one record, whatever fails.
"""

import asyncio
import logging
import urllib.parse
from typing import Iterable, Optional, Union

from nuget_license_collector.cache import LicenseTextCache
from nuget_license_collector.expression import (
    parse_license_expression,
    unknown_license_ids,
)
from nuget_license_collector.models import (
    LICENSE_NOT_SPECIFIED_TEXT,
    UNKNOWN,
    LicenseType,
    PackageIdentifier,
    PackageLicenseRecord,
    VersionRecord,
)
from nuget_license_collector.resolvers.base import LicenseContentSource, RegistryClient
from nuget_license_collector.versions import NuGetVersion, select_version

logger = logging.getLogger(__name__)

FLAT_CONTAINER_URL = "https://api.nuget.org/v3-flatcontainer/{name}/{version}/{file_name}"

LICENSE_SEPARATOR = "=" * 50


class PackageLicenseResolver:
    """Resolves license records for a batch of NuGet packages.

    Collaborators are passed in explicitly; the resolver owns no global
    state. Packages are processed one at a time unless ``concurrency`` is
    greater than one.

    Attributes:
        registry: Client used to query package versions.
        cache: Cache for canonical license texts.
        fetcher: Source for license texts and license documents.
        max_attempts: Registry query attempts per package.
        retry_delay: Base delay in seconds; attempt n waits n * retry_delay.
        concurrency: Maximum number of packages resolved at the same time.
    """

    def __init__(
        self,
        registry: RegistryClient,
        cache: LicenseTextCache,
        fetcher: LicenseContentSource,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        concurrency: int = 1,
        flat_container_url: str = FLAT_CONTAINER_URL,
    ) -> None:
        """Initialize the resolver.

        Args:
            registry: Registry client.
            cache: License text cache.
            fetcher: License content source.
            max_attempts: Registry query attempts per package (default: 3).
            retry_delay: Base retry delay in seconds (default: 1.0).
            concurrency: Packages resolved in parallel (default: 1).
            flat_container_url: URL template for files inside a package,
                with ``{name}``, ``{version}`` and ``{file_name}`` placeholders.
        """
        self.registry = registry
        self.cache = cache
        self.fetcher = fetcher
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.concurrency = max(1, concurrency)
        self.flat_container_url = flat_container_url

    async def resolve(
        self, identifiers: Iterable[Union[PackageIdentifier, str]]
    ) -> list[PackageLicenseRecord]:
        """Resolve license records for a batch of packages.

        Duplicate identifiers (same "Name/Version" string) are processed
        once. Failures never abort the batch; they show up as records.

        Args:
            identifiers: PackageIdentifier objects or "Name[/Version]" strings.

        Returns:
            One record per distinct identifier, sorted by package name.
        """
        unique: dict[str, PackageIdentifier] = {}
        for identifier in identifiers:
            if isinstance(identifier, str):
                identifier = PackageIdentifier.parse(identifier)
            unique.setdefault(str(identifier), identifier)

        logger.info("Resolving licenses for %d packages", len(unique))

        if self.concurrency == 1:
            records = []
            for identifier in unique.values():
                records.append(await self._resolve_safely(identifier))
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(identifier: PackageIdentifier) -> PackageLicenseRecord:
                async with semaphore:
                    return await self._resolve_safely(identifier)

            records = await asyncio.gather(*(bounded(i) for i in unique.values()))

        return sorted(records, key=lambda record: record.name)

    async def _resolve_safely(self, identifier: PackageIdentifier) -> PackageLicenseRecord:
        try:
            return await self._resolve_one(identifier)
        except Exception as e:
            logger.error("Error processing package %s: %s", identifier, e)
            return PackageLicenseRecord.error(identifier, str(e))

    async def _query_versions(self, package_name: str) -> Optional[list[VersionRecord]]:
        """Query the registry, retrying with a linearly increasing delay.

        Returns:
            Version records, or None if every attempt failed.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self.registry.query_versions(
                    package_name, include_prerelease=True, include_unlisted=True
                )
            except Exception as e:
                if attempt == self.max_attempts:
                    logger.error(
                        "Failed to retrieve metadata for package %s after %d attempts: %s",
                        package_name,
                        attempt,
                        e,
                    )
                    return None
                logger.warning("Retry %d for package %s: %s", attempt, package_name, e)
                await asyncio.sleep(self.retry_delay * attempt)
        return None

    async def _resolve_one(self, identifier: PackageIdentifier) -> PackageLicenseRecord:
        logger.debug(
            "Searching for package %s (version: %s)",
            identifier.name,
            identifier.version or "latest",
        )

        versions = await self._query_versions(identifier.name)
        if versions is None:
            return PackageLicenseRecord.metadata_failed(identifier)

        selected = select_version(versions, identifier.version)
        if selected is None:
            logger.warning("Package %s not found", identifier)
            return PackageLicenseRecord.not_found(identifier)

        license_type, license_url, license_text = await self._resolve_license(selected)

        return PackageLicenseRecord(
            name=selected.package_id,
            version=selected.version,
            author=selected.authors or UNKNOWN,
            project_url=selected.project_url or "",
            license_type=license_type,
            license_url=license_url,
            license_text=license_text,
        )

    async def _resolve_license(
        self, record: VersionRecord
    ) -> tuple[str, Optional[str], str]:
        """Work out license type, URL and text for a version record.

        Returns:
            Tuple of (license_type, license_url, license_text).
        """
        try:
            license_url = record.license_url
            license_text = ""

            if record.license_expression:
                license_type = record.license_expression
                license_text = await self._expression_text(record.license_expression)
            elif record.license_file:
                license_type = LicenseType.FILE
                license_text = await self._license_file_text(record)
            elif license_url:
                license_type = LicenseType.EXTERNAL
            else:
                return (LicenseType.NOT_SPECIFIED, None, LICENSE_NOT_SPECIFIED_TEXT)

            if license_url and not license_text:
                license_text = await self.fetcher.fetch_content(license_url)

            if license_type == LicenseType.FILE and not license_text:
                license_text = f"License file: {record.license_file}"

            return (license_type, license_url, license_text)

        except Exception as e:
            logger.error("Error getting license info for %s: %s", record.package_id, e)
            return (
                LicenseType.ERROR,
                None,
                f"Error retrieving license information: {e}",
            )

    async def _license_file_text(self, record: VersionRecord) -> str:
        parsed = NuGetVersion.parse(record.version)
        version = parsed.normalized() if parsed is not None else record.version
        url = self.flat_container_url.format(
            name=urllib.parse.quote(record.package_id.lower(), safe=""),
            version=urllib.parse.quote(version.lower(), safe=""),
            file_name=urllib.parse.quote(record.license_file),
        )
        try:
            return await self.fetcher.fetch_content(url)
        except Exception as e:
            logger.warning(
                "Failed to download license file for %s: %s", record.package_id, e
            )
            return ""

    async def _expression_text(self, expression: str) -> str:
        """Return the license text(s) for an SPDX expression.

        A compound expression yields every license text under a numbered
        header, separated by a rule.
        """
        try:
            license_ids = parse_license_expression(expression)

            unknown = unknown_license_ids(license_ids)
            if unknown:
                logger.debug("Not on the SPDX license list: %s", ", ".join(unknown))

            if len(license_ids) == 1:
                return await self._license_text(license_ids[0])

            sections = []
            for number, license_id in enumerate(license_ids, start=1):
                text = await self._license_text(license_id)
                sections.append(f"--- LICENSE {number}: {license_id} ---\n\n{text}\n")
            return f"\n{LICENSE_SEPARATOR}\n\n".join(sections)

        except Exception as e:
            logger.error("Error getting license text for %s: %s", expression, e)
            return f"Error retrieving license text for '{expression}'"

    async def _license_text(self, license_id: str) -> str:
        cached = self.cache.get(license_id)
        if cached is not None:
            logger.debug("Using cached license text for %s", license_id)
            return cached

        result = await self.fetcher.fetch_license_text(license_id)
        self.cache.put(license_id, result.text, persist=result.ok)
        return result.text

    async def close(self) -> None:
        """Close the registry client and fetcher if they hold resources."""
        for component in (self.registry, self.fetcher):
            close = getattr(component, "close", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> "PackageLicenseResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
