"""NuGet version parsing and version selection.

NuGet versions are SemVer 2.0 with two extensions: up to four numeric
components (``1.0.0.0``) and missing trailing components (``1.0`` means
``1.0.0``). Release labels compare case-insensitively and build metadata
never affects ordering or equality.
"""

import logging
import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional, Sequence

import semantic_version

from nuget_license_collector.models import VersionRecord

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"  # numeric components
    r"(?:-([0-9A-Za-z.-]+))?"  # release label
    r"(?:\+([0-9A-Za-z.-]+))?$"  # build metadata
)


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """A parsed NuGet version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        revision: Optional fourth component (0 when absent).
        release: Release label as published (e.g., "beta.1"), or "".
        metadata: Build metadata, or "".
    """

    major: int
    minor: int
    patch: int
    revision: int = 0
    release: str = ""
    metadata: str = ""
    _release_key: semantic_version.Version = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def parse(cls, value: str) -> Optional["NuGetVersion"]:
        """Parse a NuGet version string.

        Args:
            value: Version string such as "1.0", "2.1.0-beta.1" or "4.0.0.1".

        Returns:
            NuGetVersion, or None if the string is not a valid version.
        """
        match = _VERSION_PATTERN.match(value.strip()) if value else None
        if not match:
            return None

        major, minor, patch, revision, release, metadata = match.groups()
        labels = tuple(release.lower().split(".")) if release else ()
        try:
            # Release precedence follows SemVer; the numeric part is
            # compared separately because NuGet allows a fourth component.
            release_key = semantic_version.Version(
                major=0, minor=0, patch=0, prerelease=labels, build=()
            )
        except ValueError:
            return None

        return cls(
            major=int(major),
            minor=int(minor or 0),
            patch=int(patch or 0),
            revision=int(revision or 0),
            release=release or "",
            metadata=metadata or "",
            _release_key=release_key,
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release)

    @property
    def triple(self) -> tuple[int, int, int]:
        """Return (major, minor, patch), ignoring revision and labels."""
        return (self.major, self.minor, self.patch)

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch, self.revision, self._release_key)

    def normalized(self) -> str:
        """Return the normalized string form, without build metadata."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release:
            text += f"-{self.release}"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NuGetVersion") -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self.metadata:
            return f"{self.normalized()}+{self.metadata}"
        return self.normalized()


def _sort_key(record: VersionRecord) -> tuple:
    parsed = NuGetVersion.parse(record.version)
    if parsed is None:
        return (0,)
    return (1, parsed._key())


def latest_version(records: Sequence[VersionRecord]) -> Optional[VersionRecord]:
    """Return the record with the highest version.

    Records whose version cannot be parsed rank below all parsed ones.
    """
    if not records:
        return None
    return max(records, key=_sort_key)


def _match_parsed(
    target: NuGetVersion, records: Sequence[VersionRecord]
) -> Optional[VersionRecord]:
    parsed = [(r, NuGetVersion.parse(r.version)) for r in records]
    parsed = [(r, v) for r, v in parsed if v is not None]

    for record, version in parsed:
        if version == target:
            return record

    normalized = target.normalized()
    for record, version in parsed:
        if version.normalized() == normalized:
            return record

    for record, version in parsed:
        if version.triple == target.triple:
            return record

    return None


def select_version(
    records: Sequence[VersionRecord], requested: Optional[str]
) -> Optional[VersionRecord]:
    """Pick the version record that best matches a requested version.

    Preference order: latest when nothing is requested; otherwise an
    exact match, a normalized-string match, a major.minor.patch match,
    an exact string match, and finally the latest version.

    Args:
        records: Every version the registry knows for the package.
        requested: Requested version string, or None.

    Returns:
        The selected record, or None if there are no records at all.
    """
    if not records:
        return None

    if not requested:
        return latest_version(records)

    selected = None
    target = NuGetVersion.parse(requested)
    if target is not None:
        selected = _match_parsed(target, records)

    if selected is None:
        selected = next((r for r in records if r.version == requested), None)

    if selected is None:
        selected = latest_version(records)
        logger.warning(
            "Version %s of %s not found (available: %s); using %s instead",
            requested,
            selected.package_id,
            ", ".join(r.version for r in records[:10]),
            selected.version,
        )

    return selected
