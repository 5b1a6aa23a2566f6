"""Scanner for .NET project files.

Package references are read from the most precise source available:

1. ``obj/project.assets.json`` written by ``dotnet restore`` (all packages,
   including transitive ones, with resolved versions)
2. ``packages.lock.json`` next to the project (resolved versions per
   target framework)
3. ``packages.config`` for legacy projects
4. ``<PackageReference>`` items in the project file itself, with versions
   from ``Directory.Packages.props`` when central package management is used
"""

import logging
from pathlib import Path
from typing import Optional

from nuget_license_collector.models import PackageIdentifier
from nuget_license_collector.scanners.base import (
    BaseScanner,
    local_name,
    parse_xml,
    read_json,
)

logger = logging.getLogger(__name__)

PROJECT_EXTENSIONS = (".csproj", ".vbproj", ".fsproj")


class ProjectScanner(BaseScanner):
    """Scanner for .csproj, .vbproj and .fsproj files."""

    @classmethod
    def can_handle(cls, path: Path) -> bool:
        """Check if the file is a supported project file.

        Args:
            path: Path to check.

        Returns:
            True for .csproj, .vbproj and .fsproj files, False otherwise.
        """
        return path.suffix.lower() in PROJECT_EXTENSIONS

    @property
    def source_name(self) -> str:
        """Return "project"."""
        return "project"

    def scan(self) -> list[PackageIdentifier]:
        """Extract the project's package references.

        Returns:
            Package identifiers; versions are missing only when the
            project file does not state one.

        Raises:
            ScannerError: If the project or one of its lock files is
                missing or malformed.
        """
        project_path = self._require_source()
        project_dir = project_path.parent

        assets_path = project_dir / "obj" / "project.assets.json"
        if assets_path.is_file():
            logger.debug("Reading %s", assets_path)
            return self._scan_assets(assets_path)

        lock_path = project_dir / "packages.lock.json"
        if lock_path.is_file():
            logger.debug("Reading %s", lock_path)
            return self._scan_lock_file(lock_path)

        packages_config = project_dir / "packages.config"
        if packages_config.is_file():
            logger.debug("Reading %s", packages_config)
            return self._scan_packages_config(packages_config)

        logger.debug("No restore output for %s, reading package references", project_path)
        return self._scan_package_references(project_path)

    def _scan_assets(self, path: Path) -> list[PackageIdentifier]:
        data = read_json(path)
        packages = []
        for key, library in data.get("libraries", {}).items():
            if not isinstance(library, dict) or library.get("type") != "package":
                continue
            packages.append(PackageIdentifier.parse(key))
        return packages

    def _scan_lock_file(self, path: Path) -> list[PackageIdentifier]:
        data = read_json(path)
        packages = []
        for framework_deps in data.get("dependencies", {}).values():
            for name, dependency in framework_deps.items():
                if not isinstance(dependency, dict):
                    continue
                if dependency.get("type") == "Project":
                    continue
                packages.append(
                    PackageIdentifier(name=name, version=dependency.get("resolved"))
                )
        return packages

    def _scan_packages_config(self, path: Path) -> list[PackageIdentifier]:
        root = parse_xml(path)
        return [
            PackageIdentifier(name=element.get("id"), version=element.get("version"))
            for element in root.iter()
            if local_name(element.tag) == "package" and element.get("id")
        ]

    def _scan_package_references(self, path: Path) -> list[PackageIdentifier]:
        root = parse_xml(path)
        central_versions: Optional[dict[str, str]] = None
        packages = []

        for element in root.iter():
            if local_name(element.tag) != "PackageReference":
                continue

            name = element.get("Include")
            if not name:
                continue

            version = element.get("Version") or element.get("VersionOverride")
            if version is None:
                for child in element:
                    if local_name(child.tag) == "Version" and child.text:
                        version = child.text.strip()
            if version is None:
                if central_versions is None:
                    central_versions = self._central_versions(path.parent)
                version = central_versions.get(name.lower())

            packages.append(PackageIdentifier(name=name, version=version or None))

        return packages

    def _central_versions(self, start_dir: Path) -> dict[str, str]:
        """Read <PackageVersion> items from the nearest Directory.Packages.props."""
        for directory in (start_dir, *start_dir.parents):
            props = directory / "Directory.Packages.props"
            if not props.is_file():
                continue
            logger.debug("Using central package versions from %s", props)
            root = parse_xml(props)
            return {
                element.get("Include").lower(): element.get("Version")
                for element in root.iter()
                if local_name(element.tag) == "PackageVersion"
                and element.get("Include")
                and element.get("Version")
            }
        return {}
