"""Command line interface for changesets-digger."""

from __future__ import annotations

from changesets_digger.cli.app import cli, main

__all__ = ["cli", "main"]
