"""Plain-text reporter for license collection reports.

This module provides a reporter that renders the license records into a
human-readable text report using a Jinja2 template.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from nuget_license_collector.models import PackageLicenseRecord
from nuget_license_collector.reporters.base import BaseReporter, license_summary

BANNER_WIDTH = 80


class TextReporter(BaseReporter):
    """Reporter that writes the full license texts of every package.

    The report starts with a license summary and then lists each package
    with its metadata and its license text between START and END markers.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the text reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=False,
                keep_trailing_newline=True,
                trim_blocks=True,
                lstrip_blocks=True,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("nuget_license_collector.templates")
            .joinpath("report.txt.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        return env.from_string(template_content)

    def render(
        self,
        records: list[PackageLicenseRecord],
        generated_at: datetime,
    ) -> str:
        """Render license records as a text report.

        Args:
            records: Resolved license records.
            generated_at: Timestamp printed in the header.

        Returns:
            The report as a string.
        """
        return self.template.render(
            packages=records,
            summary=license_summary(records),
            generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
            banner="#" * BANNER_WIDTH,
            rule="=" * BANNER_WIDTH,
        )

    @property
    def format_name(self) -> str:
        """Return "text"."""
        return "text"

    @property
    def default_extension(self) -> str:
        """Return ".txt"."""
        return ".txt"
