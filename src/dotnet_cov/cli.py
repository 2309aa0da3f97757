"""Typer CLI entrypoint for dotnet_cov."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
import yaml

from dotnet_cov.config import AppSettings, default_packages_root, load_settings
from dotnet_cov.errors import CoverageError
from dotnet_cov.logging_utils import configure_logging, package_logger, run_log_file
from dotnet_cov.pipeline import options_from_settings, run_coverage
from dotnet_cov.resolve.artifacts import RECENCY_POLICIES, find_most_recent
from dotnet_cov.resolve.paths import resolve_path
from dotnet_cov.resolve.versions import VERSION_ORDERINGS, latest_version_dir

app = typer.Typer(
    add_completion=False,
    help="Run .NET tests with code coverage and render an HTML report.",
    no_args_is_help=True,
)


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
    verbose: bool = False,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(config_file=config_file)
    if configure:
        logger = configure_logging(run_log_file(settings.paths.logs_root), verbose=verbose)
    else:
        logger = package_logger()
    return settings, logger


def _parse_choice(value: str | None, option_name: str, allowed: tuple[str, ...]) -> str | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise typer.BadParameter(f"{option_name} must be one of: {', '.join(allowed)}")
    return normalized


def _exit_for(exc: CoverageError) -> typer.Exit:
    typer.echo(f"error[{exc.kind}]: {exc}", err=True)
    return typer.Exit(code=exc.exit_code)


@app.command("show-config")
def show_config(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("run")
def run_cmd(
    test_project: str = typer.Argument(..., help="Test project (.csproj) or its folder."),
    settings_file: str | None = typer.Option(
        None,
        "--settings",
        help="Optional .runsettings file; defaults to the first one in the project folder.",
    ),
    open_report: bool | None = typer.Option(
        None,
        "--open/--no-open",
        help="Open the generated report in the default browser.",
    ),
    no_build: bool | None = typer.Option(
        None,
        "--no-build/--build",
        help="Skip rebuilding the test project before running tests.",
    ),
    clean_results: bool | None = typer.Option(
        None,
        "--clean-results/--keep-results",
        help="Delete the results directory before running tests.",
    ),
    base_dir: Path | None = typer.Option(
        None,
        "--base-dir",
        help="Directory relative paths are resolved against (default: current directory).",
        file_okay=False,
        dir_okay=True,
    ),
    packages_root: Path | None = typer.Option(
        None,
        "--packages-root",
        help="NuGet global packages folder (default: $NUGET_PACKAGES or ~/.nuget/packages).",
        file_okay=False,
        dir_okay=True,
    ),
    ordering: str | None = typer.Option(
        None,
        "--ordering",
        help="Version directory ordering: lexical or semver.",
    ),
    recency: str | None = typer.Option(
        None,
        "--recency",
        help="Artifact recency policy: mtime or traversal.",
    ),
    results_dir: Path | None = typer.Option(
        None,
        "--results-dir",
        help="Test results directory, relative to the project folder.",
    ),
    report_dir: Path | None = typer.Option(
        None,
        "--report-dir",
        help="Report output directory, relative to the project folder.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the run result as JSON.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log DEBUG details such as version and artifact selection.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Run tests with coverage, convert the newest artifact and generate the HTML report."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True, verbose=verbose)
    base_directory = (base_dir or Path.cwd()).absolute()
    if packages_root is not None:
        packages_root = resolve_path(packages_root.expanduser(), base_directory)
    options = options_from_settings(
        settings,
        test_project=test_project,
        base_directory=base_directory,
        packages_root=packages_root or settings.paths.packages_root or default_packages_root(),
        settings_path=settings_file,
        open_report=open_report,
        no_build=no_build,
        clean_results=clean_results,
        version_ordering=_parse_choice(ordering, "ordering", VERSION_ORDERINGS),
        recency_policy=_parse_choice(recency, "recency", RECENCY_POLICIES),
        results_dir=results_dir,
        report_dir=report_dir,
    )
    result = run_coverage(options, logger=logger)

    if as_json:
        typer.echo(json.dumps(result.as_dict(), indent=2, sort_keys=True))
    else:
        typer.echo(f"run_id: {result.run_id}")
        typer.echo(f"status: {result.status}")
        typer.echo(f"settings: {result.settings_path if result.settings_path else 'none'}")
        typer.echo(f"coverage_file: {result.coverage_path if result.coverage_path else 'none'}")
        typer.echo(f"coverage_xml: {result.xml_path if result.xml_path else 'none'}")
        typer.echo(f"report: {result.report_entry_point if result.report_entry_point else 'none'}")
        if result.error_message:
            typer.echo(f"error[{result.error_kind}]: {result.error_message}", err=True)

    if not result.succeeded:
        raise typer.Exit(code=result.exit_code)


@app.command("latest-version")
def latest_version_cmd(
    package_root: Path = typer.Argument(..., help="Package cache folder holding one subfolder per version."),
    ordering: str = typer.Option("semver", "--ordering", help="lexical or semver."),
) -> None:
    """Print the newest version folder of a cached package."""

    selected_ordering = _parse_choice(ordering, "ordering", VERSION_ORDERINGS)
    try:
        selected = latest_version_dir(resolve_path(package_root, Path.cwd()), ordering=selected_ordering)
    except CoverageError as exc:
        raise _exit_for(exc) from exc
    typer.echo(str(selected))


@app.command("find-artifact")
def find_artifact_cmd(
    search_root: Path = typer.Argument(..., help="Folder to search."),
    pattern: str = typer.Option("*.coverage", "--pattern", help="File name glob."),
    recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="Search subfolders."),
    recency: str = typer.Option("mtime", "--recency", help="mtime or traversal."),
) -> None:
    """Print the most recent file matching a pattern."""

    selected_policy = _parse_choice(recency, "recency", RECENCY_POLICIES)
    try:
        selected = find_most_recent(
            resolve_path(search_root, Path.cwd()),
            pattern,
            recursive=recursive,
            policy=selected_policy,
        )
    except CoverageError as exc:
        raise _exit_for(exc) from exc
    typer.echo(str(selected))


def main() -> None:
    """CLI script entrypoint."""

    app()


if __name__ == "__main__":
    main()
