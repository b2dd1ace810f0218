"""dumpbin /IMPORTS parser.

A bare file name line opens a provider block; ``<hex> <symbol>`` lines
below it are the functions imported from that provider. Lines with more
than two columns (Import Address Table, time date stamp, ...) are validated
and skipped.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from core.errors import ParseError
from core.models import FileHint, FilePath, ImportEntry

from .sections import IMPORTS, find_section
from .tokens import is_hex

logger = structlog.get_logger("dumpbin.imports")


def parse_imports(lines: Sequence[str], caller: FilePath) -> list[ImportEntry]:
    bounds = find_section(lines, IMPORTS)
    entries: list[ImportEntry] = []
    provider: FileHint | None = None

    for index in bounds.indices():
        line = lines[index]
        parts = line.split()
        if not parts:
            continue
        if len(parts) == 1:
            provider = FileHint(parts[0])
            continue
        if not is_hex(parts[0]):
            raise ParseError(
                "imports",
                "Expects imported function to start with hexadecimal value",
                index, line,
            )
        if len(parts) > 2:
            continue
        if provider is None:
            raise ParseError("imports", "Imported function listed before any file name",
                             index, line)
        value = parts[0]
        symbol = line[line.index(value) + len(value):].strip()
        entries.append(ImportEntry(
            called_from_file=caller,
            provider_hint=provider,
            symbol=symbol,
            short_name=symbol,
        ))

    logger.info("imports_parsed", file=caller.full_name, count=len(entries))
    return entries
