"""
Symbol Tables MCP Server
────────────────────────
Runs dumpbin on a PE binary and returns its symbol surface:
  • Exported functions with decorated name, short name and C++ prototype
  • Imported functions grouped by providing DLL
  • Direct and delay-load dependents
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from core.config import Settings
from core.log import configure_logging
from core.process import DumpBinInvoker
from core.tables import ExportTable, ImportTable
from core.utils import make_file_path
from parsers.dependents import parse_delay_load_dependents, parse_dependents
from parsers.exports import parse_exports
from parsers.imports import parse_imports

# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("symbol-tables")


def _invoker() -> DumpBinInvoker:
    return DumpBinInvoker(settings=Settings.from_env())


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


def list_exports_impl(file_path: str, invoker: DumpBinInvoker | None = None) -> dict[str, Any]:
    """Exported functions of a binary (plain callable)."""
    provider = make_file_path(file_path)
    invoker = invoker or _invoker()
    anomalies: list[str] = []
    table = ExportTable()
    table.add_range(parse_exports(invoker.exports(provider.full_name), provider, anomalies))

    with_prototype = sum(1 for e in table.entries if e.prototype)
    return {
        "file": provider.to_dict(),
        "exports": table.to_list(),
        "anomalies": anomalies,
        "summary": (
            f"{len(table)} exported function(s), {with_prototype} with a C++ prototype, "
            f"{len(anomalies)} name anomal{'y' if len(anomalies) == 1 else 'ies'}."
        ),
    }


def list_imports_impl(file_path: str, invoker: DumpBinInvoker | None = None) -> dict[str, Any]:
    """Imported functions of a binary grouped by provider (plain callable)."""
    caller = make_file_path(file_path)
    invoker = invoker or _invoker()
    table = ImportTable()
    table.add_range(parse_imports(invoker.imports(caller.full_name), caller))

    by_provider: dict[str, list[str]] = {}
    for hint in table.providers:
        by_provider[hint.pathless_file_name] = [
            e.symbol for e in table.entries_for_provider(hint)
        ]
    return {
        "file": caller.to_dict(),
        "imports": by_provider,
        "summary": f"{len(table)} imported function(s) from {len(by_provider)} provider(s).",
    }


def list_dependents_impl(file_path: str, invoker: DumpBinInvoker | None = None) -> dict[str, Any]:
    """Direct and delay-load dependents of a binary (plain callable)."""
    target = make_file_path(file_path)
    invoker = invoker or _invoker()
    lines = invoker.dependents(target.full_name)
    direct = [h.pathless_file_name for h in parse_dependents(lines)]
    delayed = [h.pathless_file_name for h in parse_delay_load_dependents(lines)]
    return {
        "file": target.to_dict(),
        "dependents": direct,
        "delay_load_dependents": delayed,
        "summary": f"{len(direct)} dependent(s), {len(delayed)} delay-load dependent(s).",
    }


@mcp.tool()
def list_exports(file_path: str) -> dict[str, Any]:
    """List the functions a DLL or EXE exports (dumpbin /EXPORTS).

    Each entry carries the decorated symbol, a short function name and the
    C++ prototype when the binary provides one.
    """
    return list_exports_impl(file_path)


@mcp.tool()
def list_imports(file_path: str) -> dict[str, Any]:
    """List the functions a binary imports, grouped by DLL (dumpbin /IMPORTS)."""
    return list_imports_impl(file_path)


@mcp.tool()
def list_dependents(file_path: str) -> dict[str, Any]:
    """List the DLLs a binary depends on (dumpbin /DEPENDENTS)."""
    return list_dependents_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)
    mcp.run()
