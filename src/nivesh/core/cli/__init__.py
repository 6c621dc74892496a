"""Nivesh CLI: entry point for summary, allocation, and movers commands."""

import click

from nivesh import __version__


@click.group()
@click.version_option(version=__version__, package_name="nivesh")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None, help="YAML or JSON config file.")
@click.option("--log-level", default=None, help="Override logging.level (DEBUG, INFO, WARNING, ERROR).")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """Nivesh: portfolio valuation and performance reports."""
    from nivesh.core.cli.common import init_app

    ctx.obj = init_app(config_file, log_level)


# Register subcommands (lazy imports keep startup fast)
from .allocation_cmd import allocation
from .movers_cmd import movers
from .summary_cmd import summary

main.add_command(summary)
main.add_command(allocation)
main.add_command(movers)
