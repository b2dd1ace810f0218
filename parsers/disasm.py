"""
dumpbin /DISASM parser
──────────────────────
Recovers the call graph and per-function code extents from a listing:

    ?run@@YAXXZ (void __cdecl run(void)):
      0000000140001000: 48 83 EC 28        sub         rsp,28h
      0000000140001004: E8 17 00 00 00     call        ?step@@YAXXZ
      0000000140001009: FF 15 F1 0F 00 00  call        qword ptr [__imp_GetLastError]
      000000014000100F: CC CC CC           int         3

Two passes: label lines partition the body into function regions (their
names are needed as call targets), then each region is tokenized. An
operand token naming a known symbol becomes a caller -> callee edge; no
check is made that the mnemonic is a call, so data references to a
function also count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import structlog

from core.models import CallEntry, FilePath, FunctionRegion

from .sections import DISASSEMBLY, SectionBounds, find_section
from .tokens import (
    DECIMAL_DIGITS,
    is_address_token,
    is_filler_byte,
    is_opcode_byte,
    parse_address,
    split_operands,
)

logger = structlog.get_logger("dumpbin.disasm")

IMPORT_THUNK_PREFIX = "__imp_"


@dataclass
class DisassemblyListing:
    bounds: SectionBounds
    regions: list[FunctionRegion] = field(default_factory=list)
    calls: list[CallEntry] = field(default_factory=list)

    @property
    def function_names(self) -> list[str]:
        return [r.name for r in self.regions]


# ---------------------------------------------------------------------------
# Function boundaries
# ---------------------------------------------------------------------------


def label_name(line: str) -> str | None:
    """Function name of a label line, or ``None`` for any other line."""
    stripped = line.rstrip()
    if not stripped.endswith(":"):
        return None
    tokens = stripped.split()
    if is_address_token(tokens[0]):
        return None
    name = stripped[:-1].strip()
    return name or None


def scan_function_regions(lines: Sequence[str], start: int, end: int) -> list[FunctionRegion]:
    """Partition ``lines[start:end]`` into regions opened by label lines.

    A blank line closes the open region; lines outside any region (before
    the first label, or after a blank line) are ignored.
    """
    regions: list[FunctionRegion] = []
    current: FunctionRegion | None = None
    for index in range(start, end):
        line = lines[index]
        name = label_name(line)
        if name is not None:
            if current is not None:
                current.line_end = index
            current = FunctionRegion(name=name, line_start=index)
            regions.append(current)
        elif not line.strip() and current is not None:
            current.line_end = index
            current = None
    if current is not None:
        current.line_end = end
    return regions


# ---------------------------------------------------------------------------
# Known symbols
# ---------------------------------------------------------------------------


def build_symbol_resolver(
    function_names: Iterable[str],
    imported_symbols: Iterable[str] = (),
    aliases: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Operand text -> callee symbol.

    Imported symbols also answer to their ``__imp_`` thunk name, and a
    label such as ``?f@@YAXXZ (void __cdecl f(void))`` answers to its first
    word. Exact names always win over these aliases.
    """
    resolver: dict[str, str] = {}
    symbols = list(imported_symbols)
    names = list(function_names)
    for symbol in symbols:
        resolver.setdefault(IMPORT_THUNK_PREFIX + symbol, symbol)
    for name in names:
        first_word = name.split()[0]
        if first_word != name:
            resolver.setdefault(first_word, name)
    if aliases:
        resolver.update(aliases)
    for symbol in symbols:
        resolver[symbol] = symbol
    for name in names:
        resolver[name] = name
    return resolver


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


class RegionTokenizer:
    """Walks one region's lines, measuring code extent and collecting edges.

    Filler rule: a ``CC`` byte that is the first opcode byte on its line,
    or that follows a ``CC`` already counted as filler, extends the filler
    run. Every other byte, ``CC`` included, resets the run to zero. The
    run left at the end of the region is its trailing padding.
    """

    def __init__(self, region: FunctionRegion, file: FilePath,
                 resolver: Mapping[str, str]) -> None:
        self.region = region
        self.file = file
        self.resolver = resolver
        self.filler_run = 0
        self.calls: list[CallEntry] = []

    def feed(self, line: str) -> None:
        region = self.region
        byte_position = 0
        in_text = False
        for position, token in enumerate(line.split()):
            if in_text:
                self._operand(token)
            elif position == 0 and is_address_token(token):
                address = parse_address(token)
                if region.first_address is None:
                    region.first_address = address
                region.last_address = address
            elif is_opcode_byte(token):
                self._opcode_byte(token, byte_position)
                byte_position += 1
            else:
                in_text = True
                self._operand(token)

    def _opcode_byte(self, token: str, byte_position: int) -> None:
        region = self.region
        region.opcode_byte_count += 1
        if region.last_address is not None:
            region.last_address += 1
        if is_filler_byte(token) and (byte_position == 0 or self.filler_run > 0):
            self.filler_run += 1
        else:
            self.filler_run = 0

    def _operand(self, token: str) -> None:
        for candidate in split_operands(token):
            if candidate[0] in DECIMAL_DIGITS:
                continue
            callee = self.resolver.get(candidate)
            if callee is not None:
                self.calls.append(CallEntry(self.file, self.region.name, callee))

    def finish(self) -> FunctionRegion:
        region = self.region
        region.filler_byte_count = self.filler_run
        if region.first_address is not None and region.last_address is not None:
            region.code_byte_count = (
                region.last_address - self.filler_run - region.first_address
            )
        return region


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_disassembly(
    lines: Sequence[str],
    file: FilePath,
    imported_symbols: Iterable[str] = (),
    aliases: Mapping[str, str] | None = None,
) -> DisassemblyListing:
    """Regions and call edges of a dumpbin /DISASM listing.

    Raises ``ParseError`` when the listing header is missing.
    """
    bounds = find_section(lines, DISASSEMBLY)
    listing = DisassemblyListing(bounds=bounds)
    body = bounds.indices()
    listing.regions = scan_function_regions(lines, body.start, body.stop)
    resolver = build_symbol_resolver(listing.function_names, imported_symbols, aliases)

    for region in listing.regions:
        tokenizer = RegionTokenizer(region, file, resolver)
        for index in range(region.line_start + 1, region.line_end):
            tokenizer.feed(lines[index])
        tokenizer.finish()
        listing.calls.extend(tokenizer.calls)

    logger.info(
        "disassembly_parsed",
        file=file.full_name,
        functions=len(listing.regions),
        calls=len(listing.calls),
    )
    return listing
