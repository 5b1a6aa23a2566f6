"""Tests for the project scanner."""

import json
from pathlib import Path

import pytest

from nuget_license_collector.errors import ScannerError
from nuget_license_collector.scanners import ProjectScanner

CSPROJ = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
  <ItemGroup>
    <PackageReference Include="Newtonsoft.Json" Version="13.0.3" />
    <PackageReference Include="Serilog">
      <Version>3.1.1</Version>
    </PackageReference>
    <PackageReference Include="Polly" />
    <ProjectReference Include="..\\Lib\\Lib.csproj" />
  </ItemGroup>
</Project>
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "App" / "App.csproj"
    path.parent.mkdir()
    path.write_text(CSPROJ, encoding="utf-8")
    return path


class TestProjectScanner:
    """Test suite for ProjectScanner."""

    @pytest.mark.parametrize("name", ["App.csproj", "App.vbproj", "App.fsproj", "APP.CSPROJ"])
    def test_can_handle(self, name: str) -> None:
        assert ProjectScanner.can_handle(Path(name))

    @pytest.mark.parametrize("name", ["App.sln", "packages.config", "App.json"])
    def test_cannot_handle(self, name: str) -> None:
        assert not ProjectScanner.can_handle(Path(name))

    def test_package_references(self, project: Path) -> None:
        packages = ProjectScanner(project).scan()

        assert [str(p) for p in packages] == [
            "Newtonsoft.Json/13.0.3",
            "Serilog/3.1.1",
            "Polly",
        ]

    def test_central_package_versions(self, project: Path) -> None:
        (project.parent.parent / "Directory.Packages.props").write_text(
            "<Project>\n  <ItemGroup>\n"
            '    <PackageVersion Include="polly" Version="8.2.0" />\n'
            "  </ItemGroup>\n</Project>\n",
            encoding="utf-8",
        )

        packages = ProjectScanner(project).scan()

        assert str(packages[-1]) == "Polly/8.2.0"

    def test_assets_file_preferred(self, project: Path) -> None:
        obj = project.parent / "obj"
        obj.mkdir()
        (obj / "project.assets.json").write_text(
            json.dumps(
                {
                    "version": 3,
                    "libraries": {
                        "Newtonsoft.Json/13.0.3": {"type": "package"},
                        "System.Runtime/4.3.1": {"type": "package"},
                        "Lib/1.0.0": {"type": "project"},
                    },
                }
            ),
            encoding="utf-8",
        )

        packages = ProjectScanner(project).scan()

        assert [str(p) for p in packages] == [
            "Newtonsoft.Json/13.0.3",
            "System.Runtime/4.3.1",
        ]

    def test_lock_file(self, project: Path) -> None:
        (project.parent / "packages.lock.json").write_text(
            json.dumps(
                {
                    "version": 1,
                    "dependencies": {
                        "net8.0": {
                            "Newtonsoft.Json": {"type": "Direct", "resolved": "13.0.3"},
                            "System.Memory": {"type": "Transitive", "resolved": "4.5.5"},
                            "Lib": {"type": "Project"},
                        },
                        "net48": {
                            "Newtonsoft.Json": {"type": "Direct", "resolved": "13.0.3"},
                        },
                    },
                }
            ),
            encoding="utf-8",
        )

        packages = ProjectScanner(project).scan()

        assert [str(p) for p in packages] == [
            "Newtonsoft.Json/13.0.3",
            "System.Memory/4.5.5",
            "Newtonsoft.Json/13.0.3",
        ]

    def test_packages_config(self, tmp_path: Path) -> None:
        project = tmp_path / "Old.csproj"
        project.write_text('<Project ToolsVersion="15.0" />', encoding="utf-8")
        (tmp_path / "packages.config").write_text(
            '<?xml version="1.0" encoding="utf-8"?>\n<packages>\n'
            '  <package id="EntityFramework" version="6.4.4" targetFramework="net48" />\n'
            "</packages>\n",
            encoding="utf-8",
        )

        assert [str(p) for p in ProjectScanner(project).scan()] == ["EntityFramework/6.4.4"]

    def test_msbuild_namespace(self, tmp_path: Path) -> None:
        project = tmp_path / "Old.vbproj"
        project.write_text(
            '<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">\n'
            '  <ItemGroup><PackageReference Include="Dapper" Version="2.1.24" /></ItemGroup>\n'
            "</Project>\n",
            encoding="utf-8",
        )

        assert [str(p) for p in ProjectScanner(project).scan()] == ["Dapper/2.1.24"]

    def test_invalid_xml(self, tmp_path: Path) -> None:
        project = tmp_path / "Broken.csproj"
        project.write_text("<Project><ItemGroup>", encoding="utf-8")

        with pytest.raises(ScannerError, match="Invalid XML"):
            ProjectScanner(project).scan()

    def test_invalid_assets_json(self, project: Path) -> None:
        obj = project.parent / "obj"
        obj.mkdir()
        (obj / "project.assets.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ScannerError, match="Invalid JSON"):
            ProjectScanner(project).scan()
