"""Command-line interface for dsctl.

Commands:
    - list, status: Show services and their state
    - up, down, reload, update: Run an operation over many stacks at once
    - new, del, edit, env, ls, path: Manage individual service folders
    - clean, dry-clean: Remove folders without a compose file
    - alias, install: Shell integration

Architecture:
    Uses Click for command-line parsing with a group-based structure.
    Commands are lazy-loaded for fast startup time.
"""

from .main import cli, main

__all__ = ["cli", "main"]
