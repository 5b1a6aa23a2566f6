"""Output reporters for license collection reports.

This module provides reporters for rendering license records to plain
text and JSON.
"""

from nuget_license_collector.reporters.base import BaseReporter, license_summary
from nuget_license_collector.reporters.json import JsonReporter
from nuget_license_collector.reporters.text import TextReporter

__all__ = ["BaseReporter", "JsonReporter", "TextReporter", "license_summary"]
