"""JSON reporter for license collection reports."""

import json
from datetime import datetime

from nuget_license_collector.models import PackageLicenseRecord
from nuget_license_collector.reporters.base import BaseReporter, license_summary


class JsonReporter(BaseReporter):
    """Reporter that serializes the license records as a JSON document.

    Attributes:
        indent: Indentation passed to json.dumps.
    """

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def render(
        self,
        records: list[PackageLicenseRecord],
        generated_at: datetime,
    ) -> str:
        """Render license records as JSON.

        Args:
            records: Resolved license records.
            generated_at: Timestamp stored as ``generated_at`` (ISO 8601).

        Returns:
            JSON document with ``generated_at``, ``total_packages``,
            ``packages`` and ``license_summary`` keys.
        """
        document = {
            "generated_at": generated_at.isoformat(timespec="seconds"),
            "total_packages": len(records),
            "packages": [record.to_dict() for record in records],
            "license_summary": license_summary(records),
        }
        return json.dumps(document, indent=self.indent, ensure_ascii=False) + "\n"

    @property
    def format_name(self) -> str:
        """Return "json"."""
        return "json"

    @property
    def default_extension(self) -> str:
        """Return ".json"."""
        return ".json"
