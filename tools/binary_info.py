"""
Binary Info MCP Server
──────────────────────
Identifies a binary before dumpbin analysis:
  • Content identity (SHA-1 + size) shared by every copy of the file
  • PE header summary: architecture, bitness, DLL flag, entry point
  • Section names

Exposed as a FastMCP server so the orchestrator agent can call it
via the Model-Context-Protocol.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from core.config import Settings
from core.log import configure_logging
from core import utils

# ---------------------------------------------------------------------------
# MCP server instance
# ---------------------------------------------------------------------------

mcp = FastMCP("binary-info")

# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


def describe_binary_impl(file_path: str) -> dict[str, Any]:
    """Identity and PE header summary of a binary (plain callable)."""
    info = utils.describe_binary(file_path)
    result = info.to_dict()
    kind = "DLL" if info.is_dll else "image"
    result["summary"] = (
        f"{info.arch or 'unknown'} {kind}"
        + (f" ({info.bits}-bit)" if info.bits else "")
        + f", {info.identity.byte_size} bytes, SHA-1 {info.identity.checksum}."
    )
    return result


@mcp.tool()
def describe_binary(file_path: str) -> dict[str, Any]:
    """Describe a PE binary: content identity, architecture, entry point.

    The SHA-1 identity is what symbol tables use to unify copies of the
    same file found under different paths.
    """
    return describe_binary_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)
    mcp.run()
