"""Parsers for dumpbin.exe text output."""

from .dependents import parse_delay_load_dependents, parse_dependents
from .disasm import DisassemblyListing, parse_disassembly, scan_function_regions
from .exports import parse_export_name, parse_exports
from .imports import parse_imports
from .pipeline import (
    BinaryAnalysis,
    analyze_binary,
    analyze_call_graph,
    analyze_output,
    merge_analyses,
)
from .sections import SectionBounds, find_section

__all__ = [
    "BinaryAnalysis",
    "DisassemblyListing",
    "SectionBounds",
    "analyze_binary",
    "analyze_call_graph",
    "analyze_output",
    "find_section",
    "merge_analyses",
    "parse_delay_load_dependents",
    "parse_dependents",
    "parse_disassembly",
    "parse_export_name",
    "parse_exports",
    "parse_imports",
    "scan_function_regions",
]
