"""
dumpbin /EXPORTS parser
───────────────────────
Each data line between the column header and ``Summary`` reads

    <ordinal> <hint> <RVA> <name text>

where the name text may hold a decorated name (``sym = ...``) and a C++
prototype in brackets, e.g.

    1    0 00001010 ?foo@@YAXXZ = ?foo@@YAXXZ (void __cdecl foo(void))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import structlog

from core.brackets import BalancedBracketScanner
from core.errors import ParseError
from core.models import ExportEntry, FilePath

from .sections import EXPORTS, find_section
from .tokens import is_decimal, is_hex

logger = structlog.get_logger("dumpbin.exports")


@dataclass(frozen=True)
class ExportName:
    symbol: str
    short_name: str
    prototype: str | None = None
    decorated_name: str | None = None
    anomaly: str | None = None


# ---------------------------------------------------------------------------
# Name text
# ---------------------------------------------------------------------------


def short_function_name(prototype: str) -> str | None:
    """``void __cdecl ns::A<int>::run(int)`` -> ``run``.

    Takes the identifier right before the outermost argument list, without
    namespaces, class names or a trailing template argument list.
    """
    scanner = BalancedBracketScanner(prototype)
    args = next(
        (p for p in scanner.pairs if p.open_char == "(" and p.nest_level == 1), None
    )
    head = prototype[:args.open_index] if args else prototype
    head = head.rstrip()
    if head.endswith(">"):
        templates = BalancedBracketScanner(head)
        closing = [p for p in templates.pairs if p.close_index == len(head) - 1]
        if closing:
            head = head[:closing[0].open_index].rstrip()
    head = head.rsplit("::", 1)[-1]
    parts = head.split()
    return parts[-1] if parts else None


def parse_export_name(name: str) -> ExportName | None:
    """Split the free text of an export line; ``None`` if it holds nothing usable."""
    if not name:
        return None
    scanner = BalancedBracketScanner(name)
    prototype = scanner.get(0) if scanner.count >= 1 else None
    anomaly = "; ".join(scanner.failures) or None

    decorated = None
    equal_sign = name.find("=")
    if equal_sign >= 0:
        decorated = name[:equal_sign].strip() or None

    if not prototype and not decorated:
        return None
    prototype = prototype or None

    if decorated:
        symbol = decorated
    else:
        symbol = name[:scanner.pairs[0].open_index].strip() or name
    short_name = (short_function_name(prototype) if prototype else None) or symbol
    return ExportName(
        symbol=symbol,
        short_name=short_name,
        prototype=prototype,
        decorated_name=decorated,
        anomaly=anomaly,
    )


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------


def split_export_line(line: str, line_index: int | None = None) -> str:
    """Validate the fixed columns of an export line and return its name text."""
    trimmed = line.strip()
    parts = trimmed.split()
    if len(parts) < 4:
        raise ParseError("exports", "Unrecognized text in dumpbin EXPORTS output",
                         line_index, line)
    ordinal, hint, rva = parts[0], parts[1], parts[2]
    if not is_decimal(ordinal) or not is_hex(hint) or not is_hex(rva):
        raise ParseError("exports", "Unrecognized text in dumpbin EXPORTS output",
                         line_index, line)
    pos = trimmed.find(ordinal) + len(ordinal)
    pos = trimmed.find(hint, pos) + len(hint)
    pos = trimmed.find(rva, pos) + len(rva)
    return trimmed[pos:].strip()


def parse_exports(
    lines: Sequence[str],
    provider: FilePath,
    anomalies: list[str] | None = None,
) -> list[ExportEntry]:
    """Parse dumpbin /EXPORTS output for *provider*.

    Bracket anomalies in the name text are soft: the prototype is dropped,
    the anomaly is appended to *anomalies* and parsing goes on. Any column
    grammar failure raises ``ParseError``.
    """
    bounds = find_section(lines, EXPORTS)
    entries: list[ExportEntry] = []
    for index in bounds.indices():
        line = lines[index]
        if not line.strip():
            continue
        name_text = split_export_line(line, index)
        parsed = parse_export_name(name_text)
        if parsed is None:
            raise ParseError("exports", "Export name has neither prototype nor decorated name",
                             index, line)
        if parsed.anomaly:
            message = f"line {index}: {parsed.anomaly}"
            logger.warning("export_name_anomaly", line_index=index, detail=parsed.anomaly)
            if anomalies is not None:
                anomalies.append(message)
        entries.append(ExportEntry(
            provider=provider,
            prototype=parsed.prototype,
            symbol=parsed.symbol,
            short_name=parsed.short_name,
        ))
    logger.info("exports_parsed", file=provider.full_name, count=len(entries))
    return entries
