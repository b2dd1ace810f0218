"""MCP tool servers for dumpbin-based binary analysis."""

from .binary_info import mcp as binary_info_mcp
from .call_graph import mcp as call_graph_mcp
from .symbol_tables import mcp as symbol_tables_mcp

__all__ = [
    "binary_info_mcp",
    "call_graph_mcp",
    "symbol_tables_mcp",
]
