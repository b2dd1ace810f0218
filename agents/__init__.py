"""Agno orchestrator for dumpbin-based binary analysis."""
