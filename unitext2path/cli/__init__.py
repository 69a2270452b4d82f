"""Command line interface for unitext2path."""

from unitext2path.cli.main import cli

__all__ = ["cli"]
