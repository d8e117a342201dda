"""Installation validation command."""

from __future__ import annotations

import sys

import click

from seq2cov import __version__
from seq2cov.cli.exit_codes import EXIT_ERROR
from seq2cov.utils.validators import validate_installation


@click.command()
def validate() -> None:
    """Validate seq2cov installation and dependencies."""
    click.echo("Validating seq2cov installation...")

    issues = validate_installation()
    if not issues:
        click.echo("✓ All checks passed!")
        click.echo(f"  seq2cov version: {__version__}")
    else:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)
