"""Install command implementation."""

import asyncio
import logging
import sys

import click

from batchinstall import format_error, setup_logging
from batchinstall.adapter import RegistryCommands, ShellRegistryClient
from batchinstall.commands.utils import (
    EXIT_ERROR,
    config_option,
    describe_selection,
    load_manifest_or_exit,
    resolve_or_exit,
)
from batchinstall.installer import (
    Batch,
    InstallOptions,
    VersionCheckPolicy,
    broadest_profile,
    confirm_installation,
    plan_batches,
    render_plan,
    render_report,
    run_batches,
)
from batchinstall.runtime import is_preferred_runtime_available, runtime_binary

_logging = logging.getLogger(__name__)


@click.command()
@config_option
@click.option("--profile", "-p", help="Install the services of a named profile")
@click.option("--services", "-s", help="Comma-separated list of services to install")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Reinstall even if a satisfying version is already installed",
)
@click.option(
    "--silent",
    is_flag=True,
    help="Non-interactive: use the broadest profile and skip all confirmation",
)
@click.option(
    "--skip-version-check",
    is_flag=True,
    help="Only check that modules exist; install unpinned",
)
@click.option(
    "--on-version-check-failure",
    type=click.Choice(["keep-existing", "abort"]),
    default="keep-existing",
    show_default=True,
    help="What to do when the latest version cannot be looked up",
)
@click.option(
    "--batch-delay",
    type=click.FloatRange(min=0),
    default=0.0,
    help="Seconds to wait between batches and bulk sub-batches",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts")
@click.option("--dry-run", is_flag=True, help="Show the plan without installing")
@click.pass_context
def install(
    ctx,
    config_file: str | None,
    profile: str | None,
    services: str | None,
    force: bool,
    silent: bool,
    skip_version_check: bool,
    on_version_check_failure: str,
    batch_delay: float,
    yes: bool,
    dry_run: bool,
):
    """Install the modules of a profile or a list of services."""
    debug = ctx.obj.get("debug", False)
    setup_logging(debug)

    manifest = load_manifest_or_exit(config_file)

    if silent and not profile:
        widest = broadest_profile(manifest)
        if widest is not None:
            profile = widest.name
            _logging.info(f"Silent mode: using profile '{profile}'")

    resolved = resolve_or_exit(manifest, profile, services)
    selection = describe_selection(profile, services)
    if not resolved:
        click.echo(f"Nothing to install for {selection}.")
        return

    batches = plan_batches(resolved, manifest.rules)
    click.echo(render_plan(batches, title=f"Installation Plan: {selection}"))

    if dry_run:
        click.echo("\n[DRY-RUN] No modules were installed.")
        return

    interactive = not (yes or silent)
    if interactive and not confirm_installation(batches, selection):
        click.echo("Installation cancelled.")
        return

    commands = RegistryCommands.from_templates(manifest.registry)
    binary = runtime_binary(commands.install)
    if binary and not is_preferred_runtime_available(binary):
        _logging.warning(f"'{binary}' was not found on PATH; installs will likely fail")

    options = InstallOptions(
        force=force,
        automated=silent or force,
        skip_version_check=skip_version_check,
        on_version_check_failure=VersionCheckPolicy(
            on_version_check_failure.replace("-", "_")
        ),
    )

    async def between_batches(previous: Batch, upcoming: Batch) -> bool:
        if interactive and not click.confirm(
            f"\n{previous.name} done. Continue with {upcoming.name}?", default=True
        ):
            return False
        if batch_delay:
            _logging.info(f"Waiting {batch_delay:g}s before {upcoming.name}")
            await asyncio.sleep(batch_delay)
        return True

    async def between_groups(batch: Batch, index: int) -> None:
        if batch_delay:
            _logging.info(f"Waiting {batch_delay:g}s before {batch.name} sub-batch {index}")
            await asyncio.sleep(batch_delay)

    client = ShellRegistryClient(commands)
    try:
        results = asyncio.run(
            run_batches(
                batches,
                client,
                options,
                between_batches=between_batches,
                between_groups=between_groups,
            )
        )
    except click.Abort:
        raise
    except Exception as e:
        _logging.debug("Run failed", exc_info=True)
        click.echo(format_error(f"installation run failed: {e}"), err=True)
        sys.exit(EXIT_ERROR)

    click.echo("")
    click.echo(render_report(results))
