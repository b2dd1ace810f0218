"""External process boundary: running dumpbin.exe and locating it via vswhere.

The parsers never touch ``subprocess``; they receive the captured output
lines. Anything that can run a command line and hand back its output lines
and exit status satisfies :class:`ProcessRunner`.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from typing import Protocol, Sequence

import structlog

from .config import Settings
from .errors import ToolExecutionError, ToolNotFoundError

logger = structlog.get_logger("dumpbin.process")

INSTALLATION_PATH_MARKER = "installationPath:"
TIMEOUT_EXIT_STATUS = -1


@dataclass
class ProcessResult:
    lines: list[str] = field(default_factory=list)
    exit_status: int = 0
    # stderr is kept apart so diagnostics never reach the line parsers
    error_lines: list[str] = field(default_factory=list)


class ProcessRunner(Protocol):
    def run(self, args: Sequence[str]) -> ProcessResult:
        ...


class SubprocessRunner:
    """Runs a command to completion and captures stdout and stderr as text lines.

    A command that cannot be started raises ``ToolNotFoundError``; one that
    outlives *timeout* is killed and raises ``ToolExecutionError``.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> ProcessResult:
        args = list(args)
        logger.debug("process_start", args=args)
        try:
            completed = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("process_timeout", args=args, timeout=self.timeout)
            raise ToolExecutionError(
                args, TIMEOUT_EXIT_STATUS, [f"timed out after {self.timeout} seconds"]
            ) from exc
        except OSError as exc:
            raise ToolNotFoundError(f"Cannot launch {args[0]}: {exc}") from exc

        lines = _decode_lines(completed.stdout)
        error_lines = _decode_lines(completed.stderr)
        if error_lines:
            logger.warning("process_stderr", args=args, lines=error_lines[-10:])
        logger.debug("process_exit", exit_status=completed.returncode, lines=len(lines))
        return ProcessResult(lines=lines, exit_status=completed.returncode,
                             error_lines=error_lines)


def _decode_lines(data: bytes | None) -> list[str]:
    return (data or b"").decode("utf-8", errors="replace").splitlines()


# ---------------------------------------------------------------------------
# Tool discovery
# ---------------------------------------------------------------------------


def parse_installation_path(lines: Sequence[str]) -> str | None:
    """Last ``installationPath:`` value printed by vswhere, if any."""
    found = None
    for line in lines:
        if INSTALLATION_PATH_MARKER in line:
            found = line.replace(INSTALLATION_PATH_MARKER, "").strip()
    return found or None


def find_vs_installation(runner: ProcessRunner, vswhere_path: str) -> str:
    if not os.path.isfile(vswhere_path):
        raise ToolNotFoundError(f"Cannot launch vswhere.exe: {vswhere_path}")
    result = runner.run([vswhere_path])
    installation = parse_installation_path(result.lines)
    if not installation:
        raise ToolNotFoundError("Output from vswhere.exe does not mention installation path.")
    if not os.path.isdir(installation):
        raise ToolNotFoundError(
            f"Installation path reported by vswhere.exe does not exist: {installation}"
        )
    return installation


# ---------------------------------------------------------------------------
# dumpbin invoker
# ---------------------------------------------------------------------------


class DumpBinInvoker:
    """Runs dumpbin.exe with one option on one binary and returns its output.

    The executable is resolved lazily, once per invoker: an explicit
    *exe_path*, then ``DUMPBIN_PATH``, then a vswhere lookup.
    """

    def __init__(self, runner: ProcessRunner | None = None, settings: Settings | None = None,
                 exe_path: str = "") -> None:
        self.settings = settings or Settings.from_env()
        self.runner = runner or SubprocessRunner(timeout=self.settings.timeout)
        self.exe_path = exe_path or self.settings.dumpbin_path

    def ensure_exe_path(self) -> str:
        if not self.exe_path:
            installation = find_vs_installation(self.runner, self.settings.vswhere_path)
            self.exe_path = self.settings.dumpbin_under(installation)
            logger.info("dumpbin_discovered", path=self.exe_path)
        elif "dumpbin" not in self.exe_path.lower():
            raise ToolNotFoundError(f"Invalid path for dumpbin.exe: {self.exe_path}")
        if not os.path.isfile(self.exe_path):
            raise ToolNotFoundError(f"Cannot invoke dumpbin.exe: {self.exe_path}")
        return self.exe_path

    def run(self, *arguments: str) -> list[str]:
        if not arguments:
            raise ValueError("Arguments list should not be empty.")
        args = [self.ensure_exe_path(), *arguments]
        result = self.runner.run(args)
        if result.exit_status != 0:
            raise ToolExecutionError(args, result.exit_status,
                                     result.lines + result.error_lines)
        return result.lines

    def exports(self, target: str) -> list[str]:
        return self.run("/EXPORTS", target)

    def imports(self, target: str) -> list[str]:
        return self.run("/IMPORTS", target)

    def dependents(self, target: str) -> list[str]:
        return self.run("/DEPENDENTS", target)

    def disasm(self, target: str) -> list[str]:
        return self.run("/DISASM", target)
