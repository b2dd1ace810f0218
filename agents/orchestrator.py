"""
Orchestrator Agent
──────────────────
Central coordinator that receives a PE binary, invokes the dumpbin
tool servers via Agno's tool-use mechanism, and writes a report on the
binary's symbol surface and internal call structure.
"""

from __future__ import annotations

import json

from agno.agent import Agent

from core.config import Settings

# ---------------------------------------------------------------------------
# Import the *underlying* tool functions.
# @mcp.tool() wraps them in tool objects without the plain signature and
# docstring Agno needs for its tool schema, so they are re-exposed below.
# ---------------------------------------------------------------------------

from tools.binary_info import describe_binary_impl as _describe_binary
from tools.symbol_tables import list_exports_impl as _list_exports
from tools.symbol_tables import list_imports_impl as _list_imports
from tools.symbol_tables import list_dependents_impl as _list_dependents
from tools.call_graph import extract_call_graph_impl as _extract_call_graph
from tools.call_graph import function_sizes_impl as _function_sizes

# ---------------------------------------------------------------------------
# Plain wrapper functions with explicit signatures for Agno
# ---------------------------------------------------------------------------


def describe_binary(file_path: str) -> str:
    """Identify a PE binary: SHA-1 identity, size, architecture, entry point."""
    return json.dumps(_describe_binary(file_path=file_path), indent=2)


def list_exports(file_path: str) -> str:
    """List exported functions with decorated names and C++ prototypes."""
    return json.dumps(_list_exports(file_path=file_path), indent=2)


def list_imports(file_path: str) -> str:
    """List imported functions grouped by the DLL that provides them."""
    return json.dumps(_list_imports(file_path=file_path), indent=2)


def list_dependents(file_path: str) -> str:
    """List the DLLs the binary loads directly or on first use (delay load)."""
    return json.dumps(_list_dependents(file_path=file_path), indent=2)


def extract_call_graph(file_path: str) -> str:
    """Recover caller -> callee edges from the binary's disassembly.

    Returns JSON with all edges, the most-called functions and whether each
    target is an imported API.
    """
    return json.dumps(_extract_call_graph(file_path=file_path), indent=2)


def function_sizes(file_path: str) -> str:
    """Report code bytes and int 3 padding bytes for every function."""
    return json.dumps(_function_sizes(file_path=file_path), indent=2)


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are an expert Windows reverse engineer. You have access to real
dumpbin-based analysis tools that you MUST call to inspect files.
NEVER fabricate, guess, or simulate tool outputs.

## CRITICAL RULES
- You MUST actually call each tool function. Do NOT simulate or guess results.
- ONLY report symbols, calls and sizes that appear in the real tool output.
- Call edges only cover statically known targets; say so when the graph looks sparse.
- If a tool reports anomalies, list them verbatim.

## Workflow
1. Call `describe_binary(file_path)` to identify the file.
2. Call `list_dependents(file_path)` and `list_imports(file_path)`.
3. Call `list_exports(file_path)` to describe the public surface.
4. Call `extract_call_graph(file_path)` and `function_sizes(file_path)`.
5. Produce a final report based EXCLUSIVELY on tool results:
   - Identity and architecture
   - Dependencies and the imported APIs that matter most
   - Exported API surface (group C++ exports by class/namespace)
   - Call-graph hot spots and the largest functions
   - Anomalies and gaps in the analysis
"""

# ---------------------------------------------------------------------------
# Gemini model import
# ---------------------------------------------------------------------------

GeminiChat = None
try:
    from agno.models.google import Gemini as GeminiChat
except ImportError:
    GeminiChat = None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_orchestrator(settings: Settings | None = None) -> Agent:
    """Return a Gemini-backed Agno orchestrator."""
    settings = settings or Settings.from_env()

    if GeminiChat is None:
        raise RuntimeError(
            "Gemini model integration not installed. "
            "Install with: pip install 'agno[google]'"
        )
    if not settings.google_api_key:
        raise RuntimeError("GOOGLE_API_KEY environment variable not set.")

    model = GeminiChat(
        id=settings.model_id,
        api_key=settings.google_api_key,
    )

    return Agent(
        name="dumpbin-analysis-orchestrator",
        model=model,
        instructions=SYSTEM_PROMPT,
        tools=[
            describe_binary,
            list_dependents,
            list_imports,
            list_exports,
            extract_call_graph,
            function_sizes,
        ],
        markdown=True,
    )
