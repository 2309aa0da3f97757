"""Locate tool payloads in the package cache and build their argument lists."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from dotnet_cov.errors import InvalidArgumentError, NotFoundError
from dotnet_cov.resolve.versions import VersionOrdering, latest_version_dir, package_cache_dir

LOGGER = logging.getLogger(__name__)

DEFAULT_COLLECTOR = "Code Coverage"


def locate_tool_payload(version_dir: Path, payload_glob: str) -> Path:
    """Return the lexically last file under ``version_dir`` matching ``payload_glob``.

    Picking the last match prefers the newest target framework folder,
    e.g. ``tools/net8.0`` over ``tools/net6.0``.
    """

    matches = sorted(path for path in Path(version_dir).glob(payload_glob) if path.is_file())
    if not matches:
        raise NotFoundError(
            f"No tool payload matching {payload_glob!r} under: {version_dir}",
            path=Path(version_dir),
        )
    return matches[-1]


def resolve_package_tool(
    packages_root: Path,
    package_name: str,
    payload_glob: str,
    ordering: VersionOrdering | str = "semver",
    logger: logging.Logger | None = None,
) -> Path:
    """Find a tool payload inside the newest cached version of ``package_name``."""

    effective_logger = logger or LOGGER
    version_dir = latest_version_dir(package_cache_dir(packages_root, package_name), ordering=ordering)
    payload = locate_tool_payload(version_dir, payload_glob)
    effective_logger.info(
        "tools.resolved package=%s version=%s payload=%s",
        package_name,
        version_dir.name,
        payload,
    )
    return payload


def tool_launch_prefix(payload: Path, dotnet: str = "dotnet") -> list[str]:
    """Managed assemblies run through ``dotnet``; executables run directly."""

    if payload.suffix.lower() == ".dll":
        return [dotnet, str(payload)]
    return [str(payload)]


def build_test_command(
    project_path: Path,
    results_dir: Path,
    settings_path: Path | None = None,
    no_build: bool = False,
    collector: str = DEFAULT_COLLECTOR,
    dotnet: str = "dotnet",
) -> list[str]:
    args = [
        dotnet,
        "test",
        str(project_path),
        "--collect",
        collector,
        "--results-directory",
        str(results_dir),
    ]
    if settings_path is not None:
        args.extend(["--settings", str(settings_path)])
    if no_build:
        args.append("--no-build")
    return args


def build_convert_command(converter: Path, coverage_path: Path, xml_path: Path, dotnet: str = "dotnet") -> list[str]:
    return [
        *tool_launch_prefix(converter, dotnet=dotnet),
        "analyze",
        f"/output:{xml_path}",
        str(coverage_path),
    ]


def build_report_command(
    report_tool: Path,
    report_paths: Sequence[Path],
    target_dir: Path,
    report_types: Sequence[str] = ("Html",),
    dotnet: str = "dotnet",
) -> list[str]:
    if not report_paths:
        raise InvalidArgumentError("At least one report input path is required.")
    if not report_types:
        raise InvalidArgumentError("At least one report type is required.")
    return [
        *tool_launch_prefix(report_tool, dotnet=dotnet),
        f"-reports:{';'.join(str(path) for path in report_paths)}",
        f"-targetdir:{target_dir}",
        f"-reporttypes:{';'.join(report_types)}",
    ]
