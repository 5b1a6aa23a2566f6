"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any, Optional

import pytest

from nuget_license_collector.cache import LicenseTextCache
from nuget_license_collector.models import FetchResult, VersionRecord
from nuget_license_collector.resolvers.base import LicenseContentSource, RegistryClient
from nuget_license_collector.resolvers.content import fallback_license_text

SERVICE_INDEX_URL = "https://api.nuget.org/v3/index.json"
REGISTRATION_BASE_URL = "https://api.nuget.org/v3/registration5-gz-semver2/"


class StubRegistry(RegistryClient):
    """In-memory registry returning canned version lists.

    ``failures`` maps a package name to the number of calls that raise
    before the canned versions are returned.
    """

    def __init__(
        self,
        packages: dict[str, list[VersionRecord]],
        failures: Optional[dict[str, int]] = None,
    ) -> None:
        self.packages = {name.lower(): value for name, value in packages.items()}
        self.failures = {name.lower(): n for name, n in (failures or {}).items()}
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "stub"

    async def query_versions(
        self,
        package_name: str,
        include_prerelease: bool = True,
        include_unlisted: bool = True,
    ) -> list[VersionRecord]:
        self.calls.append(package_name)
        key = package_name.lower()
        if self.failures.get(key, 0) > 0:
            self.failures[key] -= 1
            raise ConnectionError(f"registry unavailable for {package_name}")
        return list(self.packages.get(key, []))


class StubFetcher(LicenseContentSource):
    """Content source serving canned license texts and documents."""

    def __init__(
        self,
        texts: Optional[dict[str, str]] = None,
        documents: Optional[dict[str, str]] = None,
    ) -> None:
        self.texts = texts or {}
        self.documents = documents or {}
        self.text_requests: list[str] = []
        self.content_requests: list[str] = []

    async def fetch_license_text(self, license_id: str) -> FetchResult:
        self.text_requests.append(license_id)
        if license_id in self.texts:
            return FetchResult(text=self.texts[license_id], ok=True)
        return FetchResult(text=fallback_license_text(license_id), ok=False)

    async def fetch_content(self, url: str) -> str:
        self.content_requests.append(url)
        return self.documents.get(url, "")


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Return a temporary license cache directory."""
    return tmp_path / "cache" / "licenses"


@pytest.fixture
def license_cache(cache_dir: Path) -> LicenseTextCache:
    """Return a LicenseTextCache backed by a temporary directory."""
    return LicenseTextCache(cache_dir=cache_dir)


@pytest.fixture
def service_index() -> dict[str, Any]:
    """Minimal NuGet V3 service index."""
    return {
        "version": "3.0.0",
        "resources": [
            {
                "@id": "https://api.nuget.org/v3-flatcontainer/",
                "@type": "PackageBaseAddress/3.0.0",
            },
            {
                "@id": "https://api.nuget.org/v3/registration5-gz-semver1/",
                "@type": "RegistrationsBaseUrl/3.4.0",
            },
            {
                "@id": REGISTRATION_BASE_URL,
                "@type": "RegistrationsBaseUrl/3.6.0",
            },
        ],
    }


def catalog_leaf(package_id: str, version: str, **entry: Any) -> dict[str, Any]:
    """Build a registration leaf with a catalog entry."""
    catalog_entry = {"id": package_id, "version": version, "listed": True}
    catalog_entry.update(entry)
    return {"catalogEntry": catalog_entry}


@pytest.fixture
def newtonsoft_registration() -> dict[str, Any]:
    """Registration index for Newtonsoft.Json with inlined leaves."""
    return {
        "count": 1,
        "items": [
            {
                "lower": "12.0.1",
                "upper": "13.0.3",
                "items": [
                    catalog_leaf(
                        "Newtonsoft.Json",
                        "12.0.1",
                        authors="James Newton-King",
                        licenseUrl="https://licenses.nuget.org/MIT",
                        licenseExpression="MIT",
                    ),
                    catalog_leaf(
                        "Newtonsoft.Json",
                        "13.0.3",
                        authors="James Newton-King",
                        projectUrl="https://www.newtonsoft.com/json",
                        licenseUrl="https://licenses.nuget.org/MIT",
                        licenseExpression="MIT",
                    ),
                    catalog_leaf(
                        "Newtonsoft.Json",
                        "13.0.4-beta1",
                        authors="James Newton-King",
                        licenseExpression="MIT",
                    ),
                ],
            }
        ],
    }
