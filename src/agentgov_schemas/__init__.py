"""Packaged JSON schemas for agentgov (loaded via importlib.resources)."""
