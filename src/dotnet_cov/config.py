"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("configs/settings.yaml")
SETTINGS_FILE_ENV = "DOTNET_COV_SETTINGS_FILE"
NUGET_PACKAGES_ENV = "NUGET_PACKAGES"


class ProjectConfig(BaseModel):
    """Project metadata settings."""

    name: str = "dotnet_cov"
    env: str = "dev"


class PathsConfig(BaseModel):
    """Filesystem locations; results/report dirs are relative to the test project folder."""

    logs_root: Path = Path("./logs")
    packages_root: Path | None = None
    results_dir: Path = Path("TestResults")
    report_dir: Path = Path("coveragereport")

    def resolved(self, project_root: Path) -> "PathsConfig":
        """Return a copy with project-relative logs/package paths resolved to absolute paths."""

        updates: dict[str, Path] = {}
        for field_name in ("logs_root", "packages_root"):
            value = getattr(self, field_name)
            if value is None:
                continue
            value = value.expanduser()
            updates[field_name] = value if value.is_absolute() else (project_root / value).resolve()
        return self.model_copy(update=updates)


class PackagesConfig(BaseModel):
    """NuGet packages providing the converter and report tools."""

    coverage_package: str = "Microsoft.CodeCoverage"
    converter_payload: str = "build/netstandard2.0/CodeCoverage/CodeCoverage.exe"
    report_package: str = "ReportGenerator"
    report_payload: str = "tools/net*/ReportGenerator.dll"


class RunConfig(BaseModel):
    """Defaults for a coverage run; CLI flags override these."""

    version_ordering: Literal["lexical", "semver"] = "semver"
    recency_policy: Literal["mtime", "traversal"] = "mtime"
    artifact_pattern: str = "*.coverage"
    settings_pattern: str = "*.runsettings"
    collector: str = "Code Coverage"
    report_types: list[str] = Field(default_factory=lambda: ["Html"], min_length=1)
    no_build: bool = False
    open_report: bool = False
    clean_results: bool = False
    dotnet: str = "dotnet"


class AppSettings(BaseSettings):
    """Top-level application settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    run: RunConfig = Field(default_factory=RunConfig)

    model_config = SettingsConfigDict(
        env_prefix="DOTNET_COV_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def find_project_root(start: Path | None = None) -> Path:
    """Locate the project root by traversing upward for config markers."""

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / "configs/settings.yaml").exists():
            return candidate
    return current


def resolve_settings_file(override: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = (find_project_root() / chosen).resolve()
    return chosen


def default_packages_root() -> Path:
    """Compute the NuGet global-packages folder the way the dotnet CLI does."""

    env_value = os.getenv(NUGET_PACKAGES_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / ".nuget" / "packages"


def load_settings(config_file: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides."""

    settings_file = resolve_settings_file(config_file)
    project_root = settings_file.parent.parent.resolve()
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    resolved_paths = settings.paths.resolved(project_root=project_root)
    return settings.model_copy(update={"paths": resolved_paths})
