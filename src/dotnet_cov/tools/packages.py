"""NuGet package-reference checks through the dotnet CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

from dotnet_cov.tools.process import CommandRunner, ProcessRunner

LOGGER = logging.getLogger(__name__)


class PackageManager(Protocol):
    def list_installed_packages(self, project_path: Path) -> set[str]: ...

    def add_package(self, project_path: Path, package_name: str) -> None: ...


def parse_package_list(output: str) -> set[str]:
    """Extract lower-cased package ids from ``dotnet list package`` output.

    Package rows start with ``>``, e.g. ``> ReportGenerator   5.2.0   5.2.0``.
    """

    packages: set[str] = set()
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped.startswith(">"):
            continue
        parts = stripped[1:].split()
        if parts:
            packages.add(parts[0].lower())
    return packages


@dataclass(slots=True)
class DotnetPackageManager:
    """Package manager collaborator backed by ``dotnet list``/``dotnet add``."""

    runner: CommandRunner = field(default_factory=ProcessRunner)
    dotnet: str = "dotnet"

    def list_installed_packages(self, project_path: Path) -> set[str]:
        invocation = self.runner.run(
            [self.dotnet, "list", str(project_path), "package"],
            capture_output=True,
        )
        return parse_package_list(invocation.stdout or "")

    def add_package(self, project_path: Path, package_name: str) -> None:
        self.runner.run([self.dotnet, "add", str(project_path), "package", package_name])


def ensure_packages(
    package_manager: PackageManager,
    project_path: Path,
    package_names: Iterable[str],
    logger: logging.Logger | None = None,
) -> list[str]:
    """Add every package in ``package_names`` the project does not reference yet.

    Returns the names that were added.
    """

    effective_logger = logger or LOGGER
    installed = {name.lower() for name in package_manager.list_installed_packages(project_path)}
    added: list[str] = []
    for package_name in package_names:
        if package_name.lower() in installed:
            effective_logger.info("packages.present project=%s package=%s", project_path, package_name)
            continue
        effective_logger.info("packages.adding project=%s package=%s", project_path, package_name)
        package_manager.add_package(project_path, package_name)
        added.append(package_name)
    return added
