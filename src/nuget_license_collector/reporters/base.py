"""Base interface for output reporters.

Reporters generate formatted output (plain text, JSON) from resolved
package license records.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from itertools import groupby
from pathlib import Path

from nuget_license_collector.models import PackageLicenseRecord


def license_summary(records: list[PackageLicenseRecord]) -> list[dict]:
    """Group records by license type.

    Args:
        records: Resolved license records.

    Returns:
        One entry per license type, sorted by type, each with
        ``license_type``, ``package_count`` and the ``packages``
        (name and version) carrying that type.
    """
    summary = []
    by_type = sorted(records, key=lambda r: (r.license_type, r.name.lower()))
    for license_type, group in groupby(by_type, key=lambda r: r.license_type):
        packages = [{"name": r.name, "version": r.version} for r in group]
        summary.append(
            {
                "license_type": license_type,
                "package_count": len(packages),
                "packages": packages,
            }
        )
    return summary


class BaseReporter(ABC):
    """Abstract base class for output reporters.

    Reporters take resolved license records and generate formatted
    output documents.
    """

    @abstractmethod
    def render(
        self,
        records: list[PackageLicenseRecord],
        generated_at: datetime,
    ) -> str:
        """Render license records to formatted output.

        Args:
            records: Resolved license records, in report order.
            generated_at: Timestamp printed in the report.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        records: list[PackageLicenseRecord],
        output_path: Path,
    ) -> None:
        """Render and write output to a file.

        Args:
            records: Resolved license records.
            output_path: Path to write the output file.
        """
        content = self.render(records, datetime.now())
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            Format name like "text" or "json".
        """
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format.

        Returns:
            Extension like ".txt" or ".json".
        """
        ...
