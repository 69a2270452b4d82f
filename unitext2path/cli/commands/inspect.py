"""Inspect command - show how a string is segmented and classified."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unitext2path.shaping.bidi import resolve, visual_order
from unitext2path.text.graphemes import segment
from unitext2path.text.scripts import classify

console = Console()


def describe_cluster(cluster: str) -> str:
    return " ".join(f"U+{ord(ch):04X}" for ch in cluster)


@click.command("inspect")
@click.argument("text")
@click.pass_context
def inspect_text(ctx: click.Context, text: str) -> None:
    """Show bidi runs, grapheme clusters and their classification for TEXT."""
    script_table = ctx.obj["config"].script_table()
    runs = resolve(text)

    table = Table(title="Clusters")
    table.add_column("Run", style="cyan", justify="right")
    table.add_column("Dir", style="yellow")
    table.add_column("Level", justify="right")
    table.add_column("Cluster", style="bold")
    table.add_column("Code points", style="dim")
    table.add_column("Class", style="green")

    for index, run in enumerate(runs):
        for cluster in segment(run.text):
            info = classify(cluster, script_table)
            label = info.kind.value if info.script is None else f"{info.kind.value}:{info.script}"
            table.add_row(
                str(index),
                run.direction.value,
                str(run.level),
                escape(cluster.replace("\n", "\\n")),
                describe_cluster(cluster),
                label,
            )

    console.print(table)
    order = ", ".join(str(runs.index(run)) for run in visual_order(runs))
    console.print(f"\n[bold]Visual run order:[/bold] {order or '-'}")
