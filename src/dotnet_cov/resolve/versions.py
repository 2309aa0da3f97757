"""Pick the newest installed version directory of a cached package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final, Literal

from packaging.version import InvalidVersion, Version

from dotnet_cov.errors import InvalidArgumentError, NotFoundError

LOGGER = logging.getLogger(__name__)

VersionOrdering = Literal["lexical", "semver"]
VERSION_ORDERINGS: Final[tuple[str, ...]] = ("lexical", "semver")

_UNPARSABLE_FLOOR: Final = Version("0")


def package_cache_dir(cache_root: Path, package_name: str) -> Path:
    """Return the cache folder for a package id (NuGet stores ids lower-cased)."""

    if not package_name.strip():
        raise InvalidArgumentError("package_name must be a non-empty string.")
    return Path(cache_root) / package_name.strip().lower()


def _semver_key(name: str) -> tuple[int, Version, str]:
    try:
        return (1, Version(name), name)
    except InvalidVersion:
        return (0, _UNPARSABLE_FLOOR, name)


def list_version_dirs(package_root: Path) -> list[Path]:
    """Return immediate subdirectories of ``package_root`` sorted by name."""

    root = Path(package_root)
    if not root.is_dir():
        raise NotFoundError(f"Package root does not exist: {root}", path=root)
    return sorted((child for child in root.iterdir() if child.is_dir()), key=lambda child: child.name)


def latest_version_dir(
    package_root: Path,
    ordering: VersionOrdering | str = "lexical",
    logger: logging.Logger | None = None,
) -> Path:
    """Return the newest version directory under ``package_root``.

    ``lexical`` compares names as plain strings, so ``1.9.0`` sorts after
    ``1.10.0``. ``semver`` parses names as versions; names that do not parse
    rank below every parsable version.
    """

    effective_logger = logger or LOGGER
    if ordering not in VERSION_ORDERINGS:
        raise InvalidArgumentError(f"ordering must be one of: {', '.join(VERSION_ORDERINGS)}")

    candidates = list_version_dirs(package_root)
    if not candidates:
        raise NotFoundError(f"No version directories found under: {package_root}", path=Path(package_root))

    if ordering == "semver":
        selected = max(candidates, key=lambda child: _semver_key(child.name))
    else:
        selected = candidates[-1]

    effective_logger.debug(
        "versions.latest package_root=%s ordering=%s candidates=%s selected=%s",
        package_root,
        ordering,
        len(candidates),
        selected.name,
    )
    return selected
