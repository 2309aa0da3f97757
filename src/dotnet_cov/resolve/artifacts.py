"""Locate the most recently produced file matching a name pattern."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final, Literal

from dotnet_cov.errors import InvalidArgumentError, NotFoundError

LOGGER = logging.getLogger(__name__)

RecencyPolicy = Literal["mtime", "traversal"]
RECENCY_POLICIES: Final[tuple[str, ...]] = ("mtime", "traversal")


def iter_matching_files(search_root: Path, name_pattern: str, recursive: bool = True) -> list[Path]:
    """Return files under ``search_root`` matching ``name_pattern`` in sorted traversal order."""

    root = Path(search_root)
    if not root.is_dir():
        raise NotFoundError(f"Search root does not exist: {root}", path=root)
    if not name_pattern.strip():
        raise InvalidArgumentError("name_pattern must be a non-empty glob.")

    matches = root.rglob(name_pattern) if recursive else root.glob(name_pattern)
    return sorted(path for path in matches if path.is_file())


def find_most_recent(
    search_root: Path,
    name_pattern: str,
    recursive: bool = True,
    policy: RecencyPolicy | str = "mtime",
    logger: logging.Logger | None = None,
) -> Path:
    """Return the most recent file under ``search_root`` matching ``name_pattern``.

    ``mtime`` selects the newest last-modified time, breaking ties by path.
    ``traversal`` selects the first match of a sorted directory walk.
    """

    effective_logger = logger or LOGGER
    if policy not in RECENCY_POLICIES:
        raise InvalidArgumentError(f"policy must be one of: {', '.join(RECENCY_POLICIES)}")

    matches = iter_matching_files(search_root, name_pattern, recursive=recursive)
    if not matches:
        raise NotFoundError(
            f"No files matching {name_pattern!r} under: {search_root}",
            path=Path(search_root),
        )

    if policy == "traversal":
        selected = matches[0]
    else:
        selected = max(matches, key=lambda path: (path.stat().st_mtime_ns, str(path)))

    effective_logger.debug(
        "artifacts.most_recent search_root=%s pattern=%s policy=%s matches=%s selected=%s",
        search_root,
        name_pattern,
        policy,
        len(matches),
        selected,
    )
    return selected.absolute()
