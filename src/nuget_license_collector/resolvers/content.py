"""Downloading and normalization of license texts and license documents.

Canonical license texts come from the SPDX license list repository.
Arbitrary license URLs (legacy ``licenseUrl`` values and embedded license
files) are downloaded as-is, with HTML pages discarded and RTF documents
converted to plain text.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from nuget_license_collector.models import FetchResult
from nuget_license_collector.resolvers.base import LicenseContentSource
from nuget_license_collector.resolvers.http import (
    DEFAULT_TIMEOUT_SECONDS,
    HttpClientBase,
)
from nuget_license_collector.rtf import rtf_to_html
from nuget_license_collector.text import html_to_text, is_likely_html, is_likely_rtf

logger = logging.getLogger(__name__)

SPDX_TEXT_URL = (
    "https://raw.githubusercontent.com/spdx/license-list-data/master/text/{license_id}.txt"
)


def fallback_license_text(license_id: str) -> str:
    """Return the placeholder used when a license text cannot be downloaded."""
    return f"!!! License text for '{license_id}' could not be retrieved. !!!"


def rtf_to_text(rtf: str) -> str:
    """Convert an RTF document to plain text via HTML.

    Returns the RTF source unchanged if it cannot be converted.
    """
    try:
        markup = rtf_to_html(rtf)
    except Exception as e:
        logger.warning("Error converting RTF to plain text: %s", e)
        return rtf
    return html_to_text(markup)


class ContentFetcher(HttpClientBase, LicenseContentSource):
    """Fetches license texts over HTTP.

    No network or parsing error escapes this class: failed license text
    downloads return the fallback text with ``ok=False`` and failed
    document downloads return an empty string.

    Use as an async context manager or call close() when done.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        spdx_text_url: str = SPDX_TEXT_URL,
    ) -> None:
        """Initialize the fetcher.

        Args:
            session: Optional externally owned aiohttp session.
            timeout: Total timeout in seconds for each request.
            spdx_text_url: URL template for canonical license texts, with a
                ``{license_id}`` placeholder.
        """
        super().__init__(session=session, timeout=timeout)
        self.spdx_text_url = spdx_text_url

    async def _get_text(self, url: str) -> Optional[str]:
        """GET a URL and return its body, or None if the request failed."""
        logger.debug("Downloading %s", url)
        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if response.status < 200 or response.status >= 300:
                    logger.debug("GET %s returned status %d", url, response.status)
                    return None
                return await response.text(errors="replace")
        except asyncio.TimeoutError:
            logger.warning("Timed out downloading %s", url)
        except aiohttp.ClientError as e:
            logger.warning("Network error downloading %s: %s", url, e)
        except Exception as e:
            logger.warning("Unexpected error downloading %s: %s", url, e)
        return None

    async def fetch_license_text(self, license_id: str) -> FetchResult:
        """Download the canonical text of an SPDX license.

        Args:
            license_id: SPDX identifier, e.g. "Apache-2.0".

        Returns:
            FetchResult with the text, or the fallback text and ok=False.
        """
        url = self.spdx_text_url.format(license_id=license_id)
        content = await self._get_text(url)

        if content is not None and not is_likely_html(content):
            return FetchResult(text=content, ok=True)

        logger.warning("License text for %s could not be retrieved", license_id)
        return FetchResult(text=fallback_license_text(license_id), ok=False)

    async def fetch_content(self, url: str) -> str:
        """Download a license document and return it as plain text.

        HTML pages are discarded; RTF documents are converted to text.

        Args:
            url: Document URL.

        Returns:
            Plain text, or an empty string if nothing usable was downloaded.
        """
        content = await self._get_text(url)
        if content is None:
            return ""

        if is_likely_html(content):
            logger.debug("Discarding HTML content from %s", url)
            return ""

        if is_likely_rtf(content):
            return rtf_to_text(content)

        return content
