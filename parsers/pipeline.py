"""End-to-end analysis of one binary: dumpbin output -> symbol and call tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

import structlog

from core.models import FilePath, FunctionRegion
from core.process import DumpBinInvoker
from core.tables import CallTable, ExportTable, FileHintTable, FilePathTable, ImportTable
from core.utils import make_file_path

from .dependents import parse_dependents
from .disasm import parse_disassembly
from .exports import parse_exports
from .imports import parse_imports

logger = structlog.get_logger("dumpbin.pipeline")


@dataclass
class BinaryAnalysis:
    """Aggregated tables for one or more analysed binaries."""

    files: FilePathTable = field(default_factory=FilePathTable)
    exports: ExportTable = field(default_factory=ExportTable)
    imports: ImportTable = field(default_factory=ImportTable)
    calls: CallTable = field(default_factory=CallTable)
    regions: list[FunctionRegion] = field(default_factory=list)
    dependents: FileHintTable = field(default_factory=FileHintTable)
    anomalies: list[str] = field(default_factory=list)

    # convenience ----------------------------------------------------------

    def merge(self, other: BinaryAnalysis) -> None:
        """Fold *other*'s tables into this one, dropping duplicates."""
        self.files.add_range(other.files.entries)
        self.exports.add_range(other.exports.entries)
        self.imports.add_range(other.imports.entries)
        self.calls.add_range(other.calls.entries)
        self.regions.extend(other.regions)
        self.dependents.add_range(other.dependents.entries)
        self.anomalies.extend(other.anomalies)

    @property
    def summary(self) -> str:
        return (
            f"{len(self.exports)} exports, {len(self.imports)} imports from "
            f"{len(self.imports.providers)} provider(s), {len(self.regions)} functions, "
            f"{len(self.calls)} call edges, {len(self.anomalies)} anomal"
            f"{'y' if len(self.anomalies) == 1 else 'ies'}."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": self.files.to_list(),
            "exports": self.exports.to_list(),
            "imports": self.imports.to_list(),
            "calls": self.calls.to_list(),
            "functions": [r.to_dict() for r in self.regions],
            "dependents": [d.pathless_file_name for d in self.dependents.file_hints],
            "anomalies": self.anomalies,
            "summary": self.summary,
        }


def analyze_output(
    file: FilePath,
    exports_lines: Sequence[str] = (),
    imports_lines: Sequence[str] = (),
    disasm_lines: Sequence[str] | None = None,
    dependents_lines: Sequence[str] | None = None,
) -> BinaryAnalysis:
    """Parse captured dumpbin output for *file*; no I/O.

    Imported symbols become call targets in the disassembly pass, so the
    import section is parsed first.
    """
    analysis = BinaryAnalysis()
    analysis.files.add(file)
    analysis.exports.add_range(parse_exports(exports_lines, file, analysis.anomalies))
    analysis.imports.add_range(parse_imports(imports_lines, file))
    if dependents_lines is not None:
        analysis.dependents.add_range(parse_dependents(dependents_lines))
    if disasm_lines is not None:
        listing = parse_disassembly(disasm_lines, file, analysis.imports.symbols)
        analysis.regions = listing.regions
        analysis.calls.add_range(listing.calls)
    logger.info("analysis_complete", file=file.full_name, summary=analysis.summary)
    return analysis


def analyze_binary(
    path: str,
    invoker: DumpBinInvoker | None = None,
    disassemble: bool = True,
    exports: bool = True,
    dependents: bool = True,
) -> BinaryAnalysis:
    """Run dumpbin on *path* (once per enabled option) and parse the output.

    A disabled section is neither run nor parsed, so a grammar failure in
    it cannot abort the others. Imports always run: they name call targets.
    """
    file = make_file_path(path)
    invoker = invoker or DumpBinInvoker()
    target = file.full_name
    logger.info("analysis_start", file=target, identity=str(file.identity),
                exports=exports, dependents=dependents, disassemble=disassemble)
    return analyze_output(
        file,
        exports_lines=invoker.exports(target) if exports else (),
        imports_lines=invoker.imports(target),
        disasm_lines=invoker.disasm(target) if disassemble else None,
        dependents_lines=invoker.dependents(target) if dependents else None,
    )


def analyze_call_graph(path: str, invoker: DumpBinInvoker | None = None) -> BinaryAnalysis:
    """Regions and call edges only: runs ``/IMPORTS`` and ``/DISASM``."""
    return analyze_binary(path, invoker, exports=False, dependents=False)


def merge_analyses(analyses: Iterable[BinaryAnalysis]) -> BinaryAnalysis:
    merged = BinaryAnalysis()
    for analysis in analyses:
        merged.merge(analysis)
    return merged
