"""In-memory entity tables with per-column indexes.

Every table keeps its entities in insertion order and suppresses exact
duplicates (by the entity's uniqueness key) at insert time. Tables only
grow. A table has a single writer; analyses running in parallel build their
own tables and merge them afterwards with ``add_range``.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, Iterable, Sequence, TypeVar

from .indexing import MultiFieldIndex
from .models import (
    CallEntry,
    ExportEntry,
    FileHint,
    FileIdentity,
    FilePath,
    ImportEntry,
)

E = TypeVar("E", bound=Hashable)


# ---------------------------------------------------------------------------
# Generic table
# ---------------------------------------------------------------------------


class EntityTable(Generic[E]):
    """Ordered entity list + exact-match index + named column indexes."""

    def __init__(self, exact: Callable[[E], Hashable] = lambda e: e) -> None:
        self._entries: list[E] = []
        self._exact: MultiFieldIndex[E, Any] = MultiFieldIndex(self._entries, exact)
        self._columns: dict[str, MultiFieldIndex[E, Any]] = {}

    def _column(self, name: str, extract: Callable[[E], Any]) -> MultiFieldIndex[E, Any]:
        index: MultiFieldIndex[E, Any] = MultiFieldIndex(self._entries, extract)
        self._columns[name] = index
        return index

    @property
    def entries(self) -> Sequence[E]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def __contains__(self, entity: object) -> bool:
        return self._exact.contains(self._exact.extract(entity))  # type: ignore[arg-type]

    def add(self, entity: E) -> int:
        """Insert *entity* unless an equal one is stored; return its row id."""
        key = self._exact.extract(entity)
        existing = self._exact.first(key)
        if existing is not None:
            return existing
        # row id must be taken before the append
        row_id = len(self._entries)
        self._entries.append(entity)
        self._exact.add(entity, row_id)
        for index in self._columns.values():
            index.add(entity, row_id)
        return row_id

    def add_range(self, entities: Iterable[E]) -> None:
        for entity in entities:
            self.add(entity)

    def lookup(self, column: str, value: Any) -> list[E]:
        return list(self._columns[column].entities(value))

    def values(self, column: str) -> list[Any]:
        return self._columns[column].unique_field_values

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self._entries]  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# Symbol tables
# ---------------------------------------------------------------------------


class ExportTable(EntityTable[ExportEntry]):
    """All function exports, indexed by symbol, short name, provider and prototype."""

    def __init__(self) -> None:
        super().__init__()
        self._column("symbol", lambda e: e.symbol)
        self._column("short_name", lambda e: e.short_name)
        self._column("provider", lambda e: e.provider_identity)
        self._column("prototype", lambda e: e.prototype or None)

    @property
    def symbols(self) -> list[str]:
        return self.values("symbol")

    @property
    def short_function_names(self) -> list[str]:
        return self.values("short_name")

    @property
    def providers(self) -> list[FileIdentity]:
        return self.values("provider")

    def entries_for_symbol(self, symbol: str) -> list[ExportEntry]:
        return self.lookup("symbol", symbol)

    def entries_for_short_name(self, short_name: str) -> list[ExportEntry]:
        return self.lookup("short_name", short_name)

    def entries_for_provider(self, provider: FilePath | FileIdentity) -> list[ExportEntry]:
        if isinstance(provider, FilePath):
            provider = provider.identity
        return self.lookup("provider", provider)

    def entries_for_prototype(self, prototype: str) -> list[ExportEntry]:
        return self.lookup("prototype", prototype)


class ImportTable(EntityTable[ImportEntry]):
    """All function imports, one column index per field."""

    def __init__(self) -> None:
        super().__init__()
        self._column("symbol", lambda e: e.symbol)
        self._column("short_name", lambda e: e.short_name)
        self._column("caller", lambda e: e.called_from_identity)
        self._column("provider", lambda e: e.provider_hint)

    @property
    def symbols(self) -> list[str]:
        return self.values("symbol")

    @property
    def short_function_names(self) -> list[str]:
        return self.values("short_name")

    @property
    def caller_file_identities(self) -> list[FileIdentity]:
        return self.values("caller")

    @property
    def providers(self) -> list[FileHint]:
        return self.values("provider")

    def entries_for_symbol(self, symbol: str) -> list[ImportEntry]:
        return self.lookup("symbol", symbol)

    def entries_for_short_name(self, short_name: str) -> list[ImportEntry]:
        return self.lookup("short_name", short_name)

    def entries_for_caller(self, caller: FilePath | FileIdentity) -> list[ImportEntry]:
        if isinstance(caller, FilePath):
            caller = caller.identity
        return self.lookup("caller", caller)

    def entries_for_provider(self, provider: FileHint | FilePath) -> list[ImportEntry]:
        if isinstance(provider, FilePath):
            provider = provider.file_hint
        return self.lookup("provider", provider)


class CallTable(EntityTable[CallEntry]):
    """Caller -> callee edges recovered from disassembly."""

    def __init__(self) -> None:
        super().__init__()
        self._column("file", lambda e: e.called_from_identity)
        self._column("caller", lambda e: e.caller_symbol)
        self._column("callee", lambda e: e.callee_symbol)

    @property
    def callers(self) -> list[str]:
        return self.values("caller")

    @property
    def callees(self) -> list[str]:
        return self.values("callee")

    def entries_for_file(self, file: FilePath | FileIdentity) -> list[CallEntry]:
        if isinstance(file, FilePath):
            file = file.identity
        return self.lookup("file", file)

    def entries_for_caller(self, caller_symbol: str) -> list[CallEntry]:
        return self.lookup("caller", caller_symbol)

    def entries_for_callee(self, callee_symbol: str) -> list[CallEntry]:
        return self.lookup("callee", callee_symbol)


# ---------------------------------------------------------------------------
# File tables
# ---------------------------------------------------------------------------


class FilePathTable(EntityTable[FilePath]):
    """Known file paths, indexed by bare file name, full name and checksum."""

    def __init__(self) -> None:
        super().__init__()
        self._column("hint", lambda p: p.file_hint)
        self._column("full_name", lambda p: p.full_name)
        self._column("checksum", lambda p: p.identity.checksum)

    @property
    def file_paths(self) -> Sequence[FilePath]:
        return self.entries

    def file_paths_for_checksum(self, checksum: str) -> list[FilePath]:
        return self.lookup("checksum", checksum)

    def file_paths_for_hint(self, hint: FileHint | str) -> list[FilePath]:
        if isinstance(hint, str):
            hint = FileHint(hint)
        return self.lookup("hint", hint)

    def file_paths_for_name(self, full_name: str) -> list[FilePath]:
        return self.lookup("full_name", full_name)


class FileHintTable(EntityTable[FileHint]):
    """Distinct file hints; ``kernel32.dll`` and ``KERNEL32.dll`` share a row."""

    def __init__(self) -> None:
        super().__init__(exact=lambda h: h.pathless_file_name.lower())

    @property
    def file_hints(self) -> Sequence[FileHint]:
        return self.entries

    def find(self, name: str) -> FileHint | None:
        row_id = self._exact.first(name.lower())
        return self._entries[row_id] if row_id is not None else None
