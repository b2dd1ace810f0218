"""dumpbin /DEPENDENTS parser: one bare file name per line."""

from __future__ import annotations

from typing import Sequence

from core.models import FileHint

from .sections import DELAY_DEPENDENTS, DEPENDENTS, SectionSpec, find_section


def _names(lines: Sequence[str], spec: SectionSpec) -> list[FileHint]:
    bounds = find_section(lines, spec)
    return [FileHint(lines[i].strip()) for i in bounds.indices() if lines[i].strip()]


def parse_dependents(lines: Sequence[str]) -> list[FileHint]:
    return _names(lines, DEPENDENTS)


def parse_delay_load_dependents(lines: Sequence[str]) -> list[FileHint]:
    return _names(lines, DELAY_DEPENDENTS)
