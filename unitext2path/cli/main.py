"""Entry point of the ``unitext2path`` command."""

from __future__ import annotations

from pathlib import Path

import click

from unitext2path import __version__
from unitext2path.cli.commands import batch, convert, fonts, inspect_text
from unitext2path.config import Config
from unitext2path.exceptions import ConfigError
from unitext2path.log import LOG_LEVELS, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="unitext2path")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML config file (default: $UT2P_CONFIG or ~/.config/unitext2path/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, config_path: Path | None) -> None:
    """Render multi-script SVG text as glyph outlines."""
    ctx.ensure_object(dict)
    setup_logging(log_level)
    try:
        config = Config.load(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj["config"] = config
    ctx.obj["log_level"] = log_level.upper()


cli.add_command(convert)
cli.add_command(batch)
cli.add_command(fonts)
cli.add_command(inspect_text)


if __name__ == "__main__":
    cli()
