"""Multi-field index: computed field value -> ordered row ids."""

from __future__ import annotations

from typing import Callable, Generic, Hashable, Iterator, Sequence, TypeVar

E = TypeVar("E")
F = TypeVar("F", bound=Hashable)


class MultiFieldIndex(Generic[E, F]):
    """Append-only index over a row store shared with other indexes.

    *extract* computes the indexed field of an entity. A field of ``None``
    means "absent" and is never indexed; *ignore* can mark further values as
    not indexable. Row ids are kept in insertion order per field value.
    """

    def __init__(
        self,
        rows: Sequence[E],
        extract: Callable[[E], F | None],
        ignore: Callable[[F], bool] | None = None,
    ) -> None:
        self._rows = rows
        self._extract = extract
        self._ignore = ignore
        self._fields: dict[F, list[int]] = {}

    def _skipped(self, value: F | None) -> bool:
        if value is None:
            return True
        return self._ignore is not None and self._ignore(value)

    def extract(self, entity: E) -> F | None:
        return self._extract(entity)

    def add(self, entity: E, row_id: int) -> None:
        value = self._extract(entity)
        if self._skipped(value):
            return
        self._fields.setdefault(value, []).append(row_id)

    def contains(self, value: F | None) -> bool:
        if self._skipped(value):
            return False
        return value in self._fields

    def find(self, value: F | None) -> list[int]:
        if self._skipped(value):
            return []
        return list(self._fields.get(value, ()))

    def first(self, value: F | None, default: int | None = None) -> int | None:
        ids = self.find(value)
        return ids[0] if ids else default

    def entities(self, value: F | None) -> Iterator[E]:
        for row_id in self.find(value):
            yield self._rows[row_id]

    @property
    def unique_field_values(self) -> list[F]:
        return list(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
