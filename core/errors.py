"""Exceptions raised by the parsers and by the dumpbin process boundary."""

from __future__ import annotations

from typing import Sequence


class ParseError(ValueError):
    """dumpbin output does not follow the expected grammar.

    Fatal for the file being parsed: no partial table built from the same
    output should be trusted.
    """

    def __init__(self, section: str, message: str, line_index: int | None = None,
                 line: str | None = None) -> None:
        self.section = section
        self.line_index = line_index
        self.line = line
        where = f" at line {line_index}" if line_index is not None else ""
        text = f"\n    {line.strip()}" if line is not None else ""
        super().__init__(f"[{section}] {message}{where}{text}")


class ToolNotFoundError(FileNotFoundError):
    """dumpbin.exe (or vswhere.exe) could not be located."""


class ToolExecutionError(RuntimeError):
    """An external tool exited with a non-zero status."""

    def __init__(self, args: Sequence[str], exit_status: int, output: Sequence[str]) -> None:
        self.args_list = list(args)
        self.exit_status = exit_status
        self.output_tail = list(output[-10:])
        tail = "\n".join(self.output_tail)
        super().__init__(
            f"{' '.join(self.args_list)} exited with status {exit_status}"
            + (f":\n{tail}" if tail else "")
        )
