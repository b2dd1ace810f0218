"""
Call Graph MCP Server
─────────────────────
Disassembles a PE binary with dumpbin /DISASM and reports:
  • Caller -> callee edges to known functions and imported APIs
  • Per-function code size and trailing filler (int 3 padding)
  • The most-called functions
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastmcp import FastMCP

from core.config import Settings
from core.log import configure_logging
from core.process import DumpBinInvoker
from parsers.pipeline import analyze_call_graph

# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("call-graph")

TOP_CALLEES = 20


def _invoker() -> DumpBinInvoker:
    return DumpBinInvoker(settings=Settings.from_env())


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


def extract_call_graph_impl(file_path: str, invoker: DumpBinInvoker | None = None) -> dict[str, Any]:
    """Call edges recovered from the disassembly (plain callable)."""
    analysis = analyze_call_graph(file_path, invoker or _invoker())
    imported = set(analysis.imports.symbols)
    fan_in = Counter(e.callee_symbol for e in analysis.calls.entries)

    return {
        "calls": analysis.calls.to_list(),
        "most_called": [
            {"callee": name, "callers": count, "imported": name in imported}
            for name, count in fan_in.most_common(TOP_CALLEES)
        ],
        "anomalies": analysis.anomalies,
        "summary": (
            f"{len(analysis.calls)} call edge(s) between {len(analysis.regions)} function(s); "
            f"{sum(1 for e in analysis.calls.entries if e.callee_symbol in imported)} "
            f"target imported APIs."
        ),
    }


def function_sizes_impl(file_path: str, invoker: DumpBinInvoker | None = None) -> dict[str, Any]:
    """Code size statistics per function (plain callable)."""
    analysis = analyze_call_graph(file_path, invoker or _invoker())
    regions = sorted(analysis.regions, key=lambda r: r.code_byte_count, reverse=True)
    total_code = sum(r.code_byte_count for r in regions)
    total_filler = sum(r.filler_byte_count for r in regions)
    return {
        "functions": [r.to_dict() for r in regions],
        "summary": (
            f"{len(regions)} function(s), {total_code} code byte(s), "
            f"{total_filler} filler byte(s)."
        ),
    }


@mcp.tool()
def extract_call_graph(file_path: str) -> dict[str, Any]:
    """Recover the caller -> callee graph of a binary from its disassembly.

    Only calls to statically known symbols (functions labelled in the
    listing and imported APIs) are reported.
    """
    return extract_call_graph_impl(file_path)


@mcp.tool()
def function_sizes(file_path: str) -> dict[str, Any]:
    """Report code and padding byte counts for every disassembled function.

    Runs only dumpbin /IMPORTS and /DISASM; the exports are never parsed.
    """
    return function_sizes_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)
    mcp.run()
