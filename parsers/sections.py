"""Locating sections (exports, imports, dependents, disassembly) in dumpbin output.

Each section is found by a small state machine over the raw lines:

    SEEKING_HEADER -> IN_HEADER -> BODY -> DONE

A section header may need more than one sentinel line (the disassembly
header needs both ``Dump of file`` and ``File Type:``, in any order). The
body runs until a terminator line (compared after trimming) or the end of
input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import structlog

from core.errors import ParseError

logger = structlog.get_logger("dumpbin.sections")

# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------

SUMMARY = "Summary"
IMPORTS_HEADER = "Section contains the following imports:"
DELAY_IMPORTS_HEADER = "Section contains the following delay load imports:"
DEPENDENTS_HEADER = "Image has the following dependencies:"
DELAY_DEPENDENTS_HEADER = "Image has the following delay load dependencies:"
EXPORT_COLUMNS = frozenset({"ordinal", "hint", "rva", "name"})
DUMP_OF_FILE = "dump of file"
FILE_TYPE = "file type:"


class ScanState(str, Enum):
    SEEKING_HEADER = "seeking_header"
    IN_HEADER = "in_header"
    BODY = "body"
    DONE = "done"


@dataclass(frozen=True)
class SectionSpec:
    name: str
    is_header: Callable[[str], bool]
    terminators: tuple[str, ...] = (SUMMARY,)
    header_lines: int = 1
    required: bool = False


@dataclass(frozen=True)
class SectionBounds:
    """Body line range ``[start, end)``; ``start`` is ``None`` when absent."""

    name: str
    start: int | None
    end: int

    @property
    def found(self) -> bool:
        return self.start is not None

    def indices(self) -> range:
        if self.start is None:
            return range(0)
        return range(self.start, self.end)


# ---------------------------------------------------------------------------
# Header predicates
# ---------------------------------------------------------------------------


def _is_export_header(line: str) -> bool:
    tokens = {t.lower() for t in line.split()}
    return EXPORT_COLUMNS <= tokens


def _is_disasm_header(line: str) -> bool:
    lowered = line.lstrip().lower()
    return lowered.startswith(DUMP_OF_FILE) or lowered.startswith(FILE_TYPE)


def _exact(sentinel: str) -> Callable[[str], bool]:
    return lambda line: line.strip() == sentinel


EXPORTS = SectionSpec("exports", _is_export_header)
IMPORTS = SectionSpec("imports", _exact(IMPORTS_HEADER),
                      terminators=(SUMMARY, DELAY_IMPORTS_HEADER))
DEPENDENTS = SectionSpec("dependents", _exact(DEPENDENTS_HEADER),
                         terminators=(SUMMARY, DELAY_DEPENDENTS_HEADER))
DELAY_DEPENDENTS = SectionSpec("delay_dependents", _exact(DELAY_DEPENDENTS_HEADER))
DISASSEMBLY = SectionSpec("disassembly", _is_disasm_header, terminators=(),
                          header_lines=2, required=True)


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def find_section(lines: Sequence[str], spec: SectionSpec) -> SectionBounds:
    """Body bounds of *spec* in *lines*.

    Raises ``ParseError`` when a required header never completes.
    """
    state = ScanState.SEEKING_HEADER
    header_seen = 0
    start: int | None = None
    end = len(lines)

    for index, line in enumerate(lines):
        if state in (ScanState.SEEKING_HEADER, ScanState.IN_HEADER):
            if spec.is_header(line):
                header_seen += 1
                state = ScanState.IN_HEADER
                if header_seen >= spec.header_lines:
                    start = index + 1
                    state = ScanState.BODY
            continue
        if line.strip() in spec.terminators:
            end = index
            state = ScanState.DONE
            break

    if start is None:
        if spec.required:
            raise ParseError(
                spec.name,
                f"Unable to parse through lines of header from output "
                f"({header_seen} of {spec.header_lines} header lines seen)",
                line_index=len(lines),
            )
        logger.debug("section_absent", section=spec.name)
        return SectionBounds(spec.name, None, end)

    logger.debug("section_found", section=spec.name, start=start, end=end,
                 terminated=state is ScanState.DONE)
    return SectionBounds(spec.name, start, end)
