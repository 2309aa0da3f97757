"""Shared fixtures: a fake .NET workspace and fake external tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import pytest

from dotnet_cov.errors import ExternalToolError
from dotnet_cov.pipeline import CoverageRunOptions
from dotnet_cov.tools.process import ToolInvocation

PACKAGE_LIST_OUTPUT = """Project 'Sample.Tests' has the following package references
   [net8.0]:
   Top-level Package                Requested   Resolved
   > Microsoft.NET.Test.Sdk         17.8.0      17.8.0
   > xunit                          2.6.2       2.6.2
"""


def _option_value(argv: Sequence[str], prefix: str) -> str | None:
    for arg in argv:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return None


@dataclass
class FakeRunner:
    """Records commands and fakes the files dotnet/converter/reportgenerator would write."""

    package_list: str = PACKAGE_LIST_OUTPUT
    fail_when: str | None = None
    write_xml: bool = True
    write_report: bool = True
    artifact_name: str = "run.coverage"
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> ToolInvocation:
        argv = tuple(str(arg) for arg in args)
        self.calls.append(argv)
        if self.fail_when is not None and self.fail_when in argv:
            raise ExternalToolError(f"{argv[0]} exited with code 1", args=argv, returncode=1)

        stdout = None
        if argv[1:2] == ("list",):
            stdout = self.package_list
        elif argv[1:2] == ("test",):
            results_dir = Path(argv[argv.index("--results-directory") + 1])
            artifact = results_dir / "8f2c1d" / self.artifact_name
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(b"binary-coverage")
        elif "analyze" in argv and self.write_xml:
            xml_path = Path(_option_value(argv, "/output:") or "")
            xml_path.write_text("<results />", encoding="utf-8")
        elif _option_value(argv, "-targetdir:") is not None and self.write_report:
            target = Path(_option_value(argv, "-targetdir:") or "")
            target.mkdir(parents=True, exist_ok=True)
            (target / "index.html").write_text("<html></html>", encoding="utf-8")
        return ToolInvocation(args=argv, returncode=0, cwd=cwd, stdout=stdout)

    def calls_for(self, subcommand: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if subcommand in call]


@dataclass
class FakePackageManager:
    installed: set[str] = field(default_factory=set)
    added: list[str] = field(default_factory=list)

    def list_installed_packages(self, project_path: Path) -> set[str]:
        return set(self.installed)

    def add_package(self, project_path: Path, package_name: str) -> None:
        self.added.append(package_name)
        self.installed.add(package_name.lower())


@dataclass
class FakeViewer:
    opened: list[Path] = field(default_factory=list)

    def __call__(self, entry_point: Path) -> bool:
        self.opened.append(entry_point)
        return True


@dataclass(frozen=True)
class Workspace:
    root: Path
    project_dir: Path
    project_file: Path
    packages_root: Path

    def options(self, **overrides: object) -> CoverageRunOptions:
        values: dict[str, object] = {
            "test_project": "Sample.Tests/Sample.Tests.csproj",
            "base_directory": self.root,
            "packages_root": self.packages_root,
        }
        values.update(overrides)
        return CoverageRunOptions(**values)  # type: ignore[arg-type]


def make_version_dirs(package_root: Path, versions: Sequence[str]) -> Path:
    for version in versions:
        (package_root / version).mkdir(parents=True, exist_ok=True)
    return package_root


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    project_dir = tmp_path / "Sample.Tests"
    project_dir.mkdir()
    project_file = project_dir / "Sample.Tests.csproj"
    project_file.write_text("<Project Sdk=\"Microsoft.NET.Sdk\" />", encoding="utf-8")

    packages_root = tmp_path / "nuget" / "packages"
    for version in ("9.1.0", "10.0.0"):
        converter = packages_root / "microsoft.codecoverage" / version / "build/netstandard2.0/CodeCoverage/CodeCoverage.exe"
        converter.parent.mkdir(parents=True)
        converter.write_bytes(b"")
    for framework in ("net6.0", "net8.0"):
        report_tool = packages_root / "reportgenerator" / "5.2.0" / "tools" / framework / "ReportGenerator.dll"
        report_tool.parent.mkdir(parents=True)
        report_tool.write_bytes(b"")

    return Workspace(
        root=tmp_path,
        project_dir=project_dir,
        project_file=project_file,
        packages_root=packages_root,
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def package_manager() -> FakePackageManager:
    return FakePackageManager(installed={"microsoft.codecoverage", "reportgenerator"})


@pytest.fixture
def viewer() -> FakeViewer:
    return FakeViewer()
