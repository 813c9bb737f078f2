"""Plan command implementation."""

import click

from batchinstall import setup_logging
from batchinstall.commands.utils import (
    config_option,
    describe_selection,
    load_manifest_or_exit,
    resolve_or_exit,
)
from batchinstall.installer import plan_batches, render_plan


@click.command()
@config_option
@click.option("--profile", "-p", help="Plan the services of a named profile")
@click.option("--services", "-s", help="Comma-separated list of services to plan")
@click.pass_context
def plan(ctx, config_file: str | None, profile: str | None, services: str | None):
    """Show the resolved modules and install batches without installing."""
    setup_logging(ctx.obj.get("debug", False))
    manifest = load_manifest_or_exit(config_file)
    resolved = resolve_or_exit(manifest, profile, services)
    selection = describe_selection(profile, services)

    if not resolved:
        click.echo(f"Nothing to install for {selection}.")
        return

    batches = plan_batches(resolved, manifest.rules)
    click.echo(render_plan(batches, title=f"Installation Plan: {selection}"))
