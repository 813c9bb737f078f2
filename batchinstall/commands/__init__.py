"""CLI command definitions for batchinstall."""

import click

from batchinstall import __version__
from batchinstall.commands.config import config
from batchinstall.commands.install import install
from batchinstall.commands.list import list_manifest
from batchinstall.commands.plan import plan


@click.group()
@click.version_option(__version__, prog_name="batchinstall")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def cli(ctx, debug):
    """Install manifest-defined modules in capacity-safe batches."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(install)
cli.add_command(plan)
cli.add_command(list_manifest, name="list")
cli.add_command(config)

__all__ = ["cli"]


if __name__ == "__main__":
    cli()
