"""Fonts command - script table and font loading utilities."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unitext2path.api import build_font_loader
from unitext2path.exceptions import FontLoadError
from unitext2path.fonts import FontCache
from unitext2path.fonts.loaders import family_display_name

console = Console()


def format_ranges(ranges: tuple[tuple[int, int], ...]) -> str:
    return ", ".join(f"U+{start:04X}-U+{end:04X}" for start, end in ranges)


@click.group()
def fonts() -> None:
    """Font management commands."""
    pass


@fonts.command("scripts")
@click.pass_context
def list_scripts(ctx: click.Context) -> None:
    """Show the script table: code-point ranges and candidate families."""
    table_data = ctx.obj["config"].script_table()

    table = Table(title="Script Fonts")
    table.add_column("Script", style="cyan")
    table.add_column("Ranges", style="dim")
    table.add_column("Families", style="green")
    table.add_column("CJK", style="yellow")

    for entry in table_data:
        table.add_row(
            entry.tag,
            format_ranges(entry.ranges),
            ", ".join(family_display_name(f) for f in entry.families),
            "yes" if entry.cjk else "",
        )

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(table_data)} scripts")


@fonts.command("fetch")
@click.argument("family")
@click.option("--weight", type=click.IntRange(1, 1000), default=400, show_default=True, help="Font weight")
@click.pass_context
def fetch_font(ctx: click.Context, family: str, weight: int) -> None:
    """Load FAMILY through the configured font loaders.

    Family names use ``+`` or spaces between words (``Noto+Sans+Arabic``).
    """
    cache = FontCache(build_font_loader(ctx.obj["config"]))
    family = family.strip().replace(" ", "+")

    with console.status(f"[bold green]Loading '{escape(family_display_name(family))}'..."):
        try:
            handle = cache.get(family, weight)
        except FontLoadError as e:
            console.print(f"[red]Not found:[/red] {escape(str(e))}")
            raise SystemExit(1) from e

    console.print(f"[green]Loaded:[/green] {escape(family_display_name(family))} w={weight}")
    console.print(f"[dim]Units per em:[/dim] {handle.units_per_em}")
    console.print(f"[dim]Glyphs:[/dim] {handle.glyph_count}")
    features = handle.feature_tags()
    if features:
        console.print(f"[dim]GSUB features:[/dim] {', '.join(features)}")
