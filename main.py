import json
import os
import sys

from core.config import Settings
from core.log import configure_logging


def main():
    args = sys.argv[1:]
    raw = "--json" in args
    args = [a for a in args if a != "--json"]
    if len(args) != 1:
        print("Usage: python main.py [--json] <path_to_binary>")
        sys.exit(1)

    binary_path = args[0]

    # Ensure the file exists
    if not os.path.exists(binary_path):
        print(f"Error: File '{binary_path}' not found.")
        sys.exit(1)

    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    # --json: dump the parsed tables without involving the agent
    if raw:
        from parsers.pipeline import analyze_binary

        analysis = analyze_binary(binary_path)
        print(json.dumps(analysis.to_dict(), indent=2))
        return

    from agents.orchestrator import create_orchestrator

    agent = create_orchestrator(settings)

    if settings.debug:
        agent.show_tool_calls = True

    prompt = (
        f"Analyse the symbol surface and call graph of the binary at: {binary_path}\n"
        f"Use each of your tools (describe_binary, list_dependents, list_imports, "
        f"list_exports, extract_call_graph, function_sizes) and report findings "
        f"based ONLY on the real tool outputs."
    )

    print(f"--- Starting Analysis for {binary_path} ---\n")
    agent.print_response(prompt, stream=True)


if __name__ == "__main__":
    main()
