"""Tests for package-reference checks."""

from pathlib import Path

from conftest import PACKAGE_LIST_OUTPUT, FakePackageManager, FakeRunner
from dotnet_cov.tools.packages import DotnetPackageManager, ensure_packages, parse_package_list


class TestParsePackageList:
    def test_extracts_lower_cased_ids(self) -> None:
        assert parse_package_list(PACKAGE_LIST_OUTPUT) == {"microsoft.net.test.sdk", "xunit"}

    def test_no_packages(self) -> None:
        output = "Project 'A' has the following package references\n   [net8.0]: No packages were found for this framework.\n"
        assert parse_package_list(output) == set()


class TestDotnetPackageManager:
    def test_lists_and_adds_with_argument_lists(self) -> None:
        runner = FakeRunner()
        manager = DotnetPackageManager(runner=runner)
        project = Path("/p/A.Tests.csproj")

        assert "xunit" in manager.list_installed_packages(project)
        manager.add_package(project, "ReportGenerator")

        assert runner.calls == [
            ("dotnet", "list", "/p/A.Tests.csproj", "package"),
            ("dotnet", "add", "/p/A.Tests.csproj", "package", "ReportGenerator"),
        ]


class TestEnsurePackages:
    def test_adds_only_missing_packages(self) -> None:
        manager = FakePackageManager(installed={"microsoft.codecoverage"})
        added = ensure_packages(manager, Path("/p/A.csproj"), ["Microsoft.CodeCoverage", "ReportGenerator"])
        assert added == ["ReportGenerator"]
        assert manager.added == ["ReportGenerator"]

    def test_nothing_added_when_present(self) -> None:
        manager = FakePackageManager(installed={"microsoft.codecoverage", "reportgenerator"})
        assert ensure_packages(manager, Path("/p/A.csproj"), ["Microsoft.CodeCoverage", "ReportGenerator"]) == []
        assert manager.added == []
