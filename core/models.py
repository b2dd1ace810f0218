"""Shared data models used by the dumpbin parsers, the tables and the MCP tools."""

from __future__ import annotations

import ntpath
from dataclasses import dataclass, field, asdict
from typing import Any


# ---------------------------------------------------------------------------
# File identity helpers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileIdentity:
    """Content identity of a binary: checksum plus byte size.

    Two copies of the same DLL found under different directories share one
    identity, so symbols are unified by content rather than by location.
    """

    checksum: str
    byte_size: int

    def __str__(self) -> str:
        return self.checksum

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, eq=False)
class FileHint:
    """A path-less file name, e.g. a DLL named in an import section.

    Equality is case-insensitive; the original spelling is kept for display.
    """

    pathless_file_name: str

    @property
    def key(self) -> str:
        return self.pathless_file_name.lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileHint):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.pathless_file_name

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.pathless_file_name}


@dataclass(frozen=True, eq=False)
class FilePath:
    """A file-system path together with the identity of its content."""

    full_name: str
    identity: FileIdentity

    @property
    def file_hint(self) -> FileHint:
        # dumpbin paths are Windows paths; ntpath also splits on '/'
        return FileHint(ntpath.basename(self.full_name))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilePath):
            return NotImplemented
        return self.full_name == other.full_name and self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        return f"{self.full_name}({self.identity})"

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.full_name, "identity": self.identity.to_dict()}


# ---------------------------------------------------------------------------
# Symbol entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ExportEntry:
    """A function exported by ``provider``.

    ``symbol`` is the decorated (mangled) name for C++ exports and the plain
    name for C exports. ``prototype`` is the human-readable C++ declaration
    when dumpbin prints one, otherwise ``None``.
    """

    provider: FilePath
    prototype: str | None
    symbol: str
    short_name: str

    @property
    def provider_identity(self) -> FileIdentity:
        return self.provider.identity

    @property
    def key(self) -> tuple[FileIdentity, str]:
        return (self.provider.identity, self.symbol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExportEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.symbol}({self.provider.file_hint})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider.full_name,
            "symbol": self.symbol,
            "short_name": self.short_name,
            "prototype": self.prototype,
        }


@dataclass(frozen=True, eq=False)
class ImportEntry:
    """A function that ``called_from_file`` imports from ``provider_hint``."""

    called_from_file: FilePath
    provider_hint: FileHint
    symbol: str
    short_name: str

    @property
    def called_from_identity(self) -> FileIdentity:
        return self.called_from_file.identity

    @property
    def key(self) -> tuple[FilePath, FileHint, str]:
        return (self.called_from_file, self.provider_hint, self.symbol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImportEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.symbol

    def to_dict(self) -> dict[str, Any]:
        return {
            "called_from": self.called_from_file.full_name,
            "provider": self.provider_hint.pathless_file_name,
            "symbol": self.symbol,
            "short_name": self.short_name,
        }


@dataclass(frozen=True, eq=False)
class CallEntry:
    """A caller -> callee edge observed in the disassembly of a file."""

    called_from_file: FilePath
    caller_symbol: str
    callee_symbol: str

    @property
    def called_from_identity(self) -> FileIdentity:
        return self.called_from_file.identity

    @property
    def key(self) -> tuple[FileIdentity, str, str]:
        return (self.called_from_file.identity, self.caller_symbol, self.callee_symbol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.callee_symbol}({self.caller_symbol})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.called_from_file.full_name,
            "caller": self.caller_symbol,
            "callee": self.callee_symbol,
        }


# ---------------------------------------------------------------------------
# Disassembly regions
# ---------------------------------------------------------------------------

@dataclass
class FunctionRegion:
    """Line range and code extent of one labelled function in a listing.

    ``line_end`` is exclusive. Address fields stay ``None`` for a region
    that never shows an address column.
    """

    name: str
    line_start: int
    line_end: int = -1
    first_address: int | None = None
    last_address: int | None = None
    opcode_byte_count: int = 0
    code_byte_count: int = 0
    filler_byte_count: int = 0

    @property
    def line_count(self) -> int:
        return max(0, self.line_end - self.line_start - 1)

    @property
    def code_address_start(self) -> int | None:
        return self.first_address

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "line_start": self.line_start,
            "line_end": self.line_end,
            "line_count": self.line_count,
            "code_address_start": (
                f"0x{self.first_address:X}" if self.first_address is not None else None
            ),
            "code_byte_count": self.code_byte_count,
            "filler_byte_count": self.filler_byte_count,
            "opcode_byte_count": self.opcode_byte_count,
        }


# ---------------------------------------------------------------------------
# PE header summary
# ---------------------------------------------------------------------------

@dataclass
class BinaryInfo:
    """Header-level metadata for a PE file, read with *pefile*."""

    path: str
    identity: FileIdentity
    arch: str = ""
    bits: int = 0
    is_dll: bool = False
    entry_point: int = 0
    section_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["entry_point"] = f"0x{self.entry_point:X}"
        return d
