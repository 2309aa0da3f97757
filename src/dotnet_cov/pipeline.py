"""Coverage run orchestration: test, convert, report, optionally open."""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal
from uuid import uuid4

from dotnet_cov.config import AppSettings
from dotnet_cov.errors import EXIT_OK, CoverageError, NotFoundError
from dotnet_cov.resolve.artifacts import RecencyPolicy, find_most_recent
from dotnet_cov.resolve.paths import PathInput, resolve_path
from dotnet_cov.resolve.versions import VersionOrdering
from dotnet_cov.tools.commands import (
    build_convert_command,
    build_report_command,
    build_test_command,
    resolve_package_tool,
)
from dotnet_cov.tools.packages import DotnetPackageManager, PackageManager, ensure_packages
from dotnet_cov.tools.process import CommandRunner, ProcessRunner, RecordingRunner, ToolInvocation
from dotnet_cov.tools.viewer import ReportViewer, open_in_browser

LOGGER = logging.getLogger(__name__)

SUMMARY_FILE_NAME = "coverage_run_summary.json"
REPORT_ENTRY_POINT = "index.html"
XML_SUFFIX = ".coveragexml"

RunStatus = Literal["succeeded", "failed"]


@dataclass(frozen=True, slots=True)
class CoverageRunOptions:
    """Runtime options for one coverage run."""

    test_project: PathInput
    base_directory: Path
    packages_root: Path
    settings_path: PathInput | None = None
    open_report: bool = False
    no_build: bool = False
    clean_results: bool = False
    version_ordering: VersionOrdering = "semver"
    recency_policy: RecencyPolicy = "mtime"
    results_dir: Path = Path("TestResults")
    report_dir: Path = Path("coveragereport")
    artifact_pattern: str = "*.coverage"
    settings_pattern: str = "*.runsettings"
    collector: str = "Code Coverage"
    report_types: tuple[str, ...] = ("Html",)
    coverage_package: str = "Microsoft.CodeCoverage"
    converter_payload: str = "build/netstandard2.0/CodeCoverage/CodeCoverage.exe"
    report_package: str = "ReportGenerator"
    report_payload: str = "tools/net*/ReportGenerator.dll"
    dotnet: str = "dotnet"

    @property
    def required_packages(self) -> tuple[str, ...]:
        return (self.coverage_package, self.report_package)


@dataclass(frozen=True, slots=True)
class CoverageRunResult:
    """Structured outcome of a coverage run."""

    run_id: str
    status: RunStatus
    exit_code: int
    started_at: datetime
    finished_at: datetime
    error_kind: str | None = None
    error_message: str | None = None
    project_path: Path | None = None
    settings_path: Path | None = None
    settings_missing: bool = False
    packages_added: tuple[str, ...] = ()
    coverage_path: Path | None = None
    xml_path: Path | None = None
    report_entry_point: Path | None = None
    report_opened: bool = False
    invocations: tuple[ToolInvocation, ...] = ()
    summary_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    def as_dict(self) -> dict[str, Any]:
        def _path(value: Path | None) -> str | None:
            return str(value) if value is not None else None

        return {
            "run_id": self.run_id,
            "status": self.status,
            "exit_code": self.exit_code,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "error_kind": self.error_kind,
            "error_message": self.error_message,
            "project_path": _path(self.project_path),
            "settings_path": _path(self.settings_path),
            "settings_missing": self.settings_missing,
            "packages_added": list(self.packages_added),
            "coverage_path": _path(self.coverage_path),
            "xml_path": _path(self.xml_path),
            "report_entry_point": _path(self.report_entry_point),
            "report_opened": self.report_opened,
            "invocations": [invocation.as_dict() for invocation in self.invocations],
            "summary_path": _path(self.summary_path),
        }


@dataclass(slots=True)
class _RunState:
    project_path: Path | None = None
    results_dir: Path | None = None
    settings_path: Path | None = None
    settings_missing: bool = False
    packages_added: list[str] = field(default_factory=list)
    coverage_path: Path | None = None
    xml_path: Path | None = None
    report_entry_point: Path | None = None
    report_opened: bool = False


def options_from_settings(
    settings: AppSettings,
    test_project: PathInput,
    base_directory: Path,
    packages_root: Path,
    **overrides: Any,
) -> CoverageRunOptions:
    """Build run options from loaded settings; non-None ``overrides`` win."""

    values: dict[str, Any] = {
        "test_project": test_project,
        "base_directory": base_directory,
        "packages_root": packages_root,
        "open_report": settings.run.open_report,
        "no_build": settings.run.no_build,
        "clean_results": settings.run.clean_results,
        "version_ordering": settings.run.version_ordering,
        "recency_policy": settings.run.recency_policy,
        "results_dir": settings.paths.results_dir,
        "report_dir": settings.paths.report_dir,
        "artifact_pattern": settings.run.artifact_pattern,
        "settings_pattern": settings.run.settings_pattern,
        "collector": settings.run.collector,
        "report_types": tuple(settings.run.report_types),
        "coverage_package": settings.packages.coverage_package,
        "converter_payload": settings.packages.converter_payload,
        "report_package": settings.packages.report_package,
        "report_payload": settings.packages.report_payload,
        "dotnet": settings.run.dotnet,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return CoverageRunOptions(**values)


def _write_json_atomically(payload: dict[str, Any], output_path: Path) -> Path:
    """Write JSON payload atomically to output path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f".{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def project_directory(project_path: Path) -> Path:
    """Folder holding the test project (the path itself when it is a directory)."""

    return project_path if project_path.is_dir() else project_path.parent


def resolve_settings_path(
    settings_path: PathInput | None,
    project_dir: Path,
    base_directory: Path,
    pattern: str = "*.runsettings",
    logger: logging.Logger | None = None,
) -> Path | None:
    """Return the explicit settings file, else the first ``pattern`` match in ``project_dir``.

    Returns None (with a warning) when nothing is supplied and nothing is found.
    """

    effective_logger = logger or LOGGER
    if settings_path is not None and str(settings_path).strip() != "":
        resolved = resolve_path(settings_path, base_directory)
        if not resolved.is_file():
            raise NotFoundError(f"Settings file does not exist: {resolved}", path=resolved)
        return resolved

    discovered = sorted(path for path in project_dir.glob(pattern) if path.is_file())
    if discovered:
        effective_logger.info("coverage_run.settings_discovered path=%s", discovered[0])
        return discovered[0]

    effective_logger.warning(
        "coverage_run.settings_missing project_dir=%s pattern=%s running without --settings",
        project_dir,
        pattern,
    )
    return None


def _clean_directory(directory: Path) -> None:
    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True, exist_ok=True)


def _execute(
    options: CoverageRunOptions,
    state: _RunState,
    runner: CommandRunner,
    package_manager: PackageManager,
    viewer: ReportViewer,
    logger: logging.Logger,
) -> None:
    project_path = resolve_path(options.test_project, options.base_directory)
    if not project_path.exists():
        raise NotFoundError(f"Test project does not exist: {project_path}", path=project_path)
    state.project_path = project_path
    project_dir = project_directory(project_path)

    state.settings_path = resolve_settings_path(
        options.settings_path,
        project_dir,
        options.base_directory,
        pattern=options.settings_pattern,
        logger=logger,
    )
    state.settings_missing = state.settings_path is None

    state.packages_added = ensure_packages(
        package_manager,
        project_path,
        options.required_packages,
        logger=logger,
    )

    results_dir = resolve_path(options.results_dir, project_dir)
    state.results_dir = results_dir
    if options.clean_results:
        logger.info("coverage_run.clean_results results_dir=%s", results_dir)
        _clean_directory(results_dir)

    runner.run(
        build_test_command(
            project_path,
            results_dir,
            settings_path=state.settings_path,
            no_build=options.no_build,
            collector=options.collector,
            dotnet=options.dotnet,
        ),
        cwd=project_dir,
    )

    coverage_path = find_most_recent(
        results_dir,
        options.artifact_pattern,
        recursive=True,
        policy=options.recency_policy,
        logger=logger,
    )
    state.coverage_path = coverage_path
    logger.info("coverage_run.artifact path=%s", coverage_path)

    converter = resolve_package_tool(
        options.packages_root,
        options.coverage_package,
        options.converter_payload,
        ordering=options.version_ordering,
        logger=logger,
    )
    xml_path = coverage_path.with_suffix(XML_SUFFIX)
    runner.run(build_convert_command(converter, coverage_path, xml_path, dotnet=options.dotnet), cwd=project_dir)
    if not xml_path.is_file():
        raise NotFoundError(f"Converter did not produce XML output: {xml_path}", path=xml_path)
    state.xml_path = xml_path

    report_tool = resolve_package_tool(
        options.packages_root,
        options.report_package,
        options.report_payload,
        ordering=options.version_ordering,
        logger=logger,
    )
    report_dir = resolve_path(options.report_dir, project_dir)
    runner.run(
        build_report_command(
            report_tool,
            [xml_path],
            report_dir,
            report_types=options.report_types,
            dotnet=options.dotnet,
        ),
        cwd=project_dir,
    )
    entry_point = report_dir / REPORT_ENTRY_POINT
    if not entry_point.is_file():
        raise NotFoundError(f"Report entry point was not generated: {entry_point}", path=entry_point)
    state.report_entry_point = entry_point

    if options.open_report:
        state.report_opened = viewer(entry_point)
        logger.info("coverage_run.report_opened entry_point=%s opened=%s", entry_point, state.report_opened)


def run_coverage(
    options: CoverageRunOptions,
    runner: CommandRunner | None = None,
    package_manager: PackageManager | None = None,
    viewer: ReportViewer | None = None,
    logger: logging.Logger | None = None,
) -> CoverageRunResult:
    """Run tests with coverage, convert the newest artifact and render the report.

    Typed failures (``CoverageError``) end the sequence and are returned as a
    failed result carrying their exit code; anything else propagates.
    """

    effective_logger = logger or LOGGER
    run_id = f"coverage-{uuid4().hex[:12]}"
    started_at = datetime.now(timezone.utc)
    recorder = RecordingRunner(runner or ProcessRunner(logger=effective_logger))
    effective_package_manager = package_manager or DotnetPackageManager(runner=recorder, dotnet=options.dotnet)
    state = _RunState()
    failure: CoverageError | None = None

    effective_logger.info(
        "coverage_run.start run_id=%s test_project=%s base_directory=%s",
        run_id,
        options.test_project,
        options.base_directory,
    )
    try:
        _execute(
            options,
            state,
            recorder,
            effective_package_manager,
            viewer or open_in_browser,
            effective_logger,
        )
    except CoverageError as exc:
        failure = exc
        effective_logger.error("coverage_run.failed run_id=%s kind=%s error=%s", run_id, exc.kind, exc)
    except Exception:
        effective_logger.exception("coverage_run.unexpected_failure run_id=%s", run_id)
        raise

    summary_path = None
    if state.results_dir is not None and state.results_dir.is_dir():
        summary_path = state.results_dir / SUMMARY_FILE_NAME

    result = CoverageRunResult(
        run_id=run_id,
        status="failed" if failure is not None else "succeeded",
        exit_code=failure.exit_code if failure is not None else EXIT_OK,
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
        error_kind=failure.kind if failure is not None else None,
        error_message=str(failure) if failure is not None else None,
        project_path=state.project_path,
        settings_path=state.settings_path,
        settings_missing=state.settings_missing,
        packages_added=tuple(state.packages_added),
        coverage_path=state.coverage_path,
        xml_path=state.xml_path,
        report_entry_point=state.report_entry_point,
        report_opened=state.report_opened,
        invocations=tuple(recorder.invocations),
        summary_path=summary_path,
    )
    if summary_path is not None:
        _write_json_atomically(result.as_dict(), summary_path)

    effective_logger.info(
        "coverage_run.summary run_id=%s status=%s exit_code=%s report=%s",
        run_id,
        result.status,
        result.exit_code,
        result.report_entry_point,
    )
    return result
