"""Typed failures raised by resolution utilities and the coverage pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

EXIT_OK = 0
EXIT_UNEXPECTED = 1


class CoverageError(Exception):
    """Base class for failures that map to a process exit code."""

    kind = "coverage_error"
    exit_code = EXIT_UNEXPECTED


class InvalidArgumentError(CoverageError):
    """A required argument is missing, empty, or not one of the allowed values."""

    kind = "invalid_argument"
    exit_code = 2


class NotFoundError(CoverageError):
    """A required file or directory does not exist."""

    kind = "not_found"
    exit_code = 3

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class ExternalToolError(CoverageError):
    """An external process could not be started or exited non-zero."""

    kind = "external_tool_failure"
    exit_code = 4

    def __init__(self, message: str, args: Sequence[str] = (), returncode: int | None = None) -> None:
        super().__init__(message)
        self.command = list(args)
        self.returncode = returncode
