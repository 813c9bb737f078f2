"""Manifest management commands."""

import click

from batchinstall.commands.config.fmt import config_fmt
from batchinstall.commands.config.init import config_init


@click.group()
def config():
    """Manifest management commands."""
    pass


config.add_command(config_fmt, name="fmt")
config.add_command(config_init, name="init")
