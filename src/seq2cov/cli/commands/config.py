"""``init-config``: write the YAML configuration template."""

from __future__ import annotations

from pathlib import Path

import click

from seq2cov.resources import get_default_config


@click.command(name="init-config")
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("seq2cov.yaml"),
    show_default=True,
    help="Where to write the template",
)
@click.option("--stdout", is_flag=True, help="Print the template instead of writing a file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file: Path, stdout: bool, force: bool) -> None:
    """Write a configuration template to edit and pass with -c."""
    template = get_default_config()
    if stdout:
        click.echo(template, nl=False)
        return
    if output_file.exists() and not force:
        raise click.ClickException(f"{output_file} already exists; use --force to overwrite it")
    output_file.write_text(template, encoding="utf-8")
    click.echo(f"Wrote configuration template to {output_file}")
