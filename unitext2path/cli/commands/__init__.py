"""CLI commands for unitext2path."""

from unitext2path.cli.commands.batch import batch
from unitext2path.cli.commands.convert import convert
from unitext2path.cli.commands.fonts import fonts
from unitext2path.cli.commands.inspect import inspect_text

__all__ = ["convert", "batch", "fonts", "inspect_text"]
