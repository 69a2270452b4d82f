"""Convert command - replace the text of one SVG file with paths."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from unitext2path.api import TextRenderer

console = Console()


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output SVG file")
@click.option("-p", "--precision", type=click.IntRange(0, 10), help="Path coordinate precision")
@click.option("--no-emoji", is_flag=True, help="Shape emoji with fonts instead of fetching artwork")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Seconds allowed for font and emoji loading")
@click.pass_context
def convert(
    ctx: click.Context,
    input_file: Path,
    output: Path | None,
    precision: int | None,
    no_emoji: bool,
    timeout: float | None,
) -> None:
    """Convert the text elements of an SVG file to paths.

    INPUT_FILE: SVG file to convert. The result is written next to it with
    a ``_text2path`` suffix unless --output is given.
    """
    config = ctx.obj["config"]
    overrides = {}
    if precision is not None:
        overrides["precision"] = precision
    if no_emoji:
        overrides["enable_emoji"] = False
    if overrides:
        config = dataclasses.replace(config, **overrides)

    renderer = TextRenderer(config=config)
    with console.status(f"[bold green]Converting {escape(input_file.name)}..."):
        result = renderer.convert_file(input_file, output, timeout=timeout)

    if not result.success:
        for error in result.errors:
            console.print(f"[red]Error:[/red] {escape(error)}")
        raise SystemExit(1)

    console.print(f"[green]Converted[/green] {result.text_count} text element(s)")
    console.print(f"[blue]Output:[/blue] {escape(str(result.output_path))}")
