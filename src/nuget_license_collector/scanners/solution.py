"""Scanner for Visual Studio solution files.

A solution does not list packages itself; the scanner finds the projects
it references and delegates to ProjectScanner for each of them.
"""

import logging
import re
from pathlib import Path, PureWindowsPath

from nuget_license_collector.errors import ScannerError
from nuget_license_collector.models import PackageIdentifier
from nuget_license_collector.scanners.base import BaseScanner, local_name, parse_xml
from nuget_license_collector.scanners.project import PROJECT_EXTENSIONS, ProjectScanner

logger = logging.getLogger(__name__)


class SolutionScanner(BaseScanner):
    """Scanner for .sln and .slnx files.

    Lines of a classic solution look like::

        Project("{FAE04EC0-...}") = "App", "src\\App\\App.csproj", "{GUID}"

    Solution folders and other non-project entries are skipped, as are
    projects that do not exist on disk.
    """

    PROJECT_PATTERN = re.compile(
        r'^Project\("\{[^}]*\}"\)\s*=\s*"[^"]*"\s*,\s*"([^"]+)"', re.MULTILINE
    )

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if the file is a solution file.

        Args:
            path: Path to check.

        Returns:
            True for .sln and .slnx files, False otherwise.
        """
        return path.suffix.lower() in (".sln", ".slnx")

    @property
    def source_name(self) -> str:
        """Return "solution"."""
        return "solution"

    def project_files(self) -> list[Path]:
        """List the existing project files referenced by the solution.

        Returns:
            Project paths, joined onto the solution directory, in solution order.

        Raises:
            ScannerError: If the solution file is missing or unreadable.
        """
        solution_path = self._require_source()

        if solution_path.suffix.lower() == ".slnx":
            relative_paths = self._slnx_project_paths(solution_path)
        else:
            try:
                content = solution_path.read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as e:
                raise ScannerError(f"Cannot read {solution_path}: {e}") from e
            relative_paths = self.PROJECT_PATTERN.findall(content)

        projects = []
        for relative in relative_paths:
            # Solutions always use Windows separators
            project_path = solution_path.parent.joinpath(*PureWindowsPath(relative).parts)
            if project_path.suffix.lower() not in PROJECT_EXTENSIONS:
                continue
            if not project_path.is_file():
                logger.warning(
                    "Project %s referenced by %s not found", project_path, solution_path.name
                )
                continue
            projects.append(project_path)

        logger.debug("Found %d projects in %s", len(projects), solution_path)
        return projects

    def _slnx_project_paths(self, path: Path) -> list[str]:
        root = parse_xml(path)
        return [
            element.get("Path")
            for element in root.iter()
            if local_name(element.tag) == "Project" and element.get("Path")
        ]

    def scan(self) -> list[PackageIdentifier]:
        """Scan every project of the solution.

        Returns:
            Package identifiers of all projects, in solution order.

        Raises:
            ScannerError: If the solution or one of its projects is malformed.
        """
        packages = []
        for project_path in self.project_files():
            packages.extend(ProjectScanner(project_path).scan())
        return packages
