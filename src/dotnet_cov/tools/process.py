"""Run external tools from discrete argument lists and record each invocation."""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

from dotnet_cov.errors import ExternalToolError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    """Outcome of one external process run."""

    args: tuple[str, ...]
    returncode: int
    cwd: Path | None = None
    stdout: str | None = None
    duration_seconds: float = 0.0

    def as_dict(self) -> dict[str, object]:
        return {
            "args": list(self.args),
            "returncode": self.returncode,
            "cwd": str(self.cwd) if self.cwd is not None else None,
            "duration_seconds": round(self.duration_seconds, 3),
        }


class CommandRunner(Protocol):
    """Anything able to run an argument list and return a ``ToolInvocation``."""

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> ToolInvocation: ...


@dataclass(slots=True)
class ProcessRunner:
    """Blocking subprocess runner that fails fast on non-zero exit codes."""

    logger: logging.Logger = field(default_factory=lambda: LOGGER)

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> ToolInvocation:
        argv = tuple(str(arg) for arg in args)
        if not argv:
            raise ExternalToolError("Cannot run an empty command.")

        self.logger.info("process.start args=%s cwd=%s", list(argv), cwd)
        started = time.time()
        try:
            completed = subprocess.run(
                argv,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=capture_output,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ExternalToolError(f"Could not start {argv[0]}: {exc}", args=argv) from exc

        invocation = ToolInvocation(
            args=argv,
            returncode=completed.returncode,
            cwd=cwd,
            stdout=completed.stdout if capture_output else None,
            duration_seconds=time.time() - started,
        )
        self.logger.info(
            "process.finish tool=%s returncode=%s duration_s=%.2f",
            argv[0],
            invocation.returncode,
            invocation.duration_seconds,
        )
        if invocation.returncode != 0:
            if capture_output and completed.stderr:
                self.logger.error("process.stderr tool=%s stderr=%s", argv[0], completed.stderr.strip())
            raise ExternalToolError(
                f"{argv[0]} exited with code {invocation.returncode}",
                args=argv,
                returncode=invocation.returncode,
            )
        return invocation


@dataclass(slots=True)
class RecordingRunner:
    """Wrap another runner and keep every invocation, including failed ones."""

    inner: CommandRunner
    invocations: list[ToolInvocation] = field(default_factory=list)

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> ToolInvocation:
        try:
            invocation = self.inner.run(args, cwd=cwd, capture_output=capture_output)
        except ExternalToolError as exc:
            self.invocations.append(
                ToolInvocation(
                    args=tuple(str(arg) for arg in args),
                    returncode=exc.returncode if exc.returncode is not None else -1,
                    cwd=cwd,
                )
            )
            raise
        self.invocations.append(invocation)
        return invocation
