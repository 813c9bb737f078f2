"""Shared utility functions for commands."""

import sys

import click

from batchinstall import ConfigError, format_error, format_suggestion, get_config_path
from batchinstall.data_loader import load_manifest
from batchinstall.installer import Manifest, ProfileNotFoundError, resolve_modules

EXIT_SUCCESS = 0
EXIT_ERROR = 1

config_option = click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Manifest file (default: $BATCHINSTALL_CONFIG, then ~/.config/batchinstall/manifest.json)",
)


def load_manifest_or_exit(config_file: str | None) -> Manifest:
    """Load the run's manifest, exiting with status 1 on ConfigError."""
    path = get_config_path(config_file)
    try:
        return load_manifest(path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)


def resolve_or_exit(
    manifest: Manifest, profile: str | None, services: str | None
) -> dict[str, str]:
    """Resolve the selection, exiting with status 1 on an unknown profile."""
    try:
        return resolve_modules(manifest, profile=profile, services=services)
    except ProfileNotFoundError as e:
        click.echo(
            format_suggestion(str(e), "run 'batchinstall list' to see profiles"),
            err=True,
        )
        sys.exit(EXIT_ERROR)


def describe_selection(profile: str | None, services: str | None) -> str:
    if profile:
        return f"profile '{profile}'"
    if services:
        return f"services {services}"
    return "enabled services"
