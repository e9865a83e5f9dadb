"""Threadline CLI — command line interface."""

import logging

import click
from threadline import __version__
from threadline.main import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="threadline")
@click.option("--verbose", "-v", is_flag=True, help="Log progress (INFO)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", default=None, help="Also write logs to this file")
def cli(verbose, debug, log_file):
    """Threadline — conversation thread reconstruction for social bots"""
    # stdout carries bundle output, so stay quiet unless asked
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    setup_logging(level=level, log_file=log_file)


# Import all command modules (registers commands onto cli group)
from . import cmd_build  # noqa: E402, F401
from . import cmd_history  # noqa: E402, F401
