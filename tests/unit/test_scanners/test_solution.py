"""Tests for the solution scanner."""

from pathlib import Path

import pytest

from nuget_license_collector.errors import ScannerError
from nuget_license_collector.scanners import SolutionScanner

SLN_CONTENT = """\
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "App", "src\\App\\App.csproj", "{11111111-1111-1111-1111-111111111111}"
EndProject
Project("{F184B08F-C81C-45F6-A57F-5ABD9991F28F}") = "Legacy", "src\\Legacy\\Legacy.vbproj", "{22222222-2222-2222-2222-222222222222}"
EndProject
Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "Solution Items", "Solution Items", "{33333333-3333-3333-3333-333333333333}"
EndProject
Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Gone", "src\\Gone\\Gone.csproj", "{44444444-4444-4444-4444-444444444444}"
EndProject
Global
EndGlobal
"""

PROJECT_TEMPLATE = """\
<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
{items}
  </ItemGroup>
</Project>
"""


def write_project(path: Path, *references: tuple[str, str]) -> Path:
    items = "\n".join(
        f'    <PackageReference Include="{name}" Version="{version}" />'
        for name, version in references
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(PROJECT_TEMPLATE.format(items=items), encoding="utf-8")
    return path


@pytest.fixture
def solution(tmp_path: Path) -> Path:
    write_project(tmp_path / "src" / "App" / "App.csproj", ("Newtonsoft.Json", "13.0.3"))
    write_project(
        tmp_path / "src" / "Legacy" / "Legacy.vbproj",
        ("Newtonsoft.Json", "13.0.3"),
        ("Serilog", "3.1.1"),
    )
    sln = tmp_path / "App.sln"
    sln.write_text(SLN_CONTENT, encoding="utf-8")
    return sln


class TestSolutionScanner:
    """Test suite for SolutionScanner."""

    @pytest.mark.parametrize("name", ["App.sln", "app.SLN", "App.slnx"])
    def test_can_handle(self, name: str) -> None:
        assert SolutionScanner.can_handle(Path(name))

    def test_cannot_handle_project(self) -> None:
        assert not SolutionScanner.can_handle(Path("App.csproj"))

    def test_source_name(self) -> None:
        assert SolutionScanner().source_name == "solution"

    def test_project_files(self, solution: Path) -> None:
        """Test that existing project entries are returned in order."""
        projects = SolutionScanner(solution).project_files()

        assert [p.name for p in projects] == ["App.csproj", "Legacy.vbproj"]
        assert all(p.is_file() for p in projects)

    def test_scan_collects_all_projects(self, solution: Path) -> None:
        packages = SolutionScanner(solution).scan()

        assert [str(p) for p in packages] == [
            "Newtonsoft.Json/13.0.3",
            "Newtonsoft.Json/13.0.3",
            "Serilog/3.1.1",
        ]

    def test_slnx(self, tmp_path: Path) -> None:
        write_project(tmp_path / "App" / "App.fsproj", ("FSharp.Core", "8.0.100"))
        slnx = tmp_path / "App.slnx"
        slnx.write_text(
            '<Solution>\n  <Folder Name="/src/">\n'
            '    <Project Path="App/App.fsproj" />\n  </Folder>\n</Solution>\n',
            encoding="utf-8",
        )

        assert [str(p) for p in SolutionScanner(slnx).scan()] == ["FSharp.Core/8.0.100"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ScannerError, match="File not found"):
            SolutionScanner(tmp_path / "missing.sln").scan()

    def test_no_source_path(self) -> None:
        with pytest.raises(ScannerError):
            SolutionScanner().scan()
