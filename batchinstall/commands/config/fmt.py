"""Format config command implementation."""

import json
import sys
import uuid
from pathlib import Path

import click

from batchinstall import ConfigError, format_error, get_config_path
from batchinstall.config import load_config


@click.command(name="fmt")
@click.argument("file", required=False, type=click.Path())
@click.option(
    "--write",
    "-w",
    is_flag=True,
    help="Overwrite the file instead of printing to stdout",
)
def config_fmt(file: str | None, write: bool):
    """Rewrite a manifest as strict, indented JSON.

    Comments are accepted on input but not preserved.

    FILE: Path to manifest (default: the manifest a run would load)
    """
    file_path = Path(file) if file else get_config_path()

    try:
        data = load_config(file_path)
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    formatted = json.dumps(data, indent=2, sort_keys=False)

    if not write:
        click.echo(formatted)
        return

    if file_path.suffix.lower() in (".yaml", ".yml"):
        click.echo(format_error("--write is not supported for YAML manifests"), err=True)
        sys.exit(1)

    temp_path = file_path.with_suffix(f".tmp.{uuid.uuid4().hex[:8]}")
    try:
        temp_path.write_text(formatted + "\n", encoding="utf-8")
        temp_path.replace(file_path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        click.echo(format_error(f"Error writing file: {e}"), err=True)
        sys.exit(1)
    click.echo(f"Formatted {file_path}")
