"""Resolve user-supplied paths against an explicit base directory."""

from __future__ import annotations

import os
from pathlib import Path

from dotnet_cov.errors import InvalidArgumentError

PathInput = str | os.PathLike[str]


def resolve_path(path: PathInput | None, base_directory: PathInput | None) -> Path:
    """Return an absolute path for ``path``, anchoring relative input at ``base_directory``.

    Absolute input is returned as-is (separators normalized by ``Path``) and the
    base is ignored. Existence is not checked.
    """

    if path is None or str(path).strip() == "":
        raise InvalidArgumentError("path must be a non-empty string.")

    candidate = Path(path)
    if candidate.is_absolute():
        return candidate

    if base_directory is None or str(base_directory).strip() == "":
        raise InvalidArgumentError(f"base_directory is required to resolve relative path {path!s}.")
    return Path(base_directory).absolute() / candidate
