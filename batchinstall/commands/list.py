"""List command implementation."""

import click

from batchinstall import setup_logging
from batchinstall.commands.utils import config_option, load_manifest_or_exit
from batchinstall.installer import order_services


@click.command(name="list")
@config_option
@click.option(
    "--verbose", "-v", is_flag=True, help="Show modules and their versions"
)
@click.pass_context
def list_manifest(ctx, config_file: str | None, verbose: bool):
    """List the services and profiles in the manifest."""
    setup_logging(ctx.obj.get("debug", False))
    manifest = load_manifest_or_exit(config_file)

    if not manifest.services:
        click.echo("No services configured.")
        return

    click.echo("Services (in install order):")
    for service in order_services(manifest, list(manifest.services)):
        priority = "-" if service.priority is None else str(service.priority)
        state = "" if service.enabled else " [disabled]"
        click.echo(
            f"  {service.name:16s} priority {priority:>3s}  "
            f"{len(service.enabled_modules())}/{len(service.modules)} modules{state}"
        )
        if service.description and verbose:
            click.echo(f"    {service.description}")
        if verbose:
            for module in service.modules.values():
                flags = []
                if not module.enabled:
                    flags.append("disabled")
                if module.required:
                    flags.append("required")
                suffix = f" [{', '.join(flags)}]" if flags else ""
                click.echo(f"    • {module.name} ({module.version}){suffix}")

    click.echo("")
    if not manifest.profiles:
        click.echo("No profiles configured.")
        return

    click.echo("Profiles:")
    for profile in manifest.profiles.values():
        click.echo(f"  {profile.name:16s} {profile.description}")
        if verbose:
            click.echo(f"    services: {', '.join(profile.services)}")
