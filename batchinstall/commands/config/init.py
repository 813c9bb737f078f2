"""Initialize config command implementation."""

import sys

import click

from batchinstall import ConfigError, ensure_user_config, format_error
from batchinstall.paths import get_user_manifest_path


@click.command(name="init")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Force re-initialization, overwriting existing manifest",
)
def config_init(force: bool):
    """Create ~/.config/batchinstall/manifest.json from packaged defaults.

    Use --force to overwrite an existing manifest (creates backup first).
    """
    config_path = get_user_manifest_path()

    if config_path.exists() and not force:
        click.echo(f"Manifest already exists: {config_path}")
        click.echo("Use --force to re-initialize (creates backup first).")
        sys.exit(1)

    if config_path.exists():
        backup_path = config_path.with_suffix(".json.bak")
        click.echo(f"Backing up existing manifest to {backup_path}...")
        config_path.replace(backup_path)

    try:
        ensure_user_config(config_path)
    except ConfigError as e:
        click.echo(format_error(f"initialization failed: {e}"), err=True)
        sys.exit(1)

    click.echo(f"✅ Manifest initialized at {config_path}")
