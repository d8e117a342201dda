"""Command line interface for seq2cov."""

from seq2cov.cli.main import cli, main

__all__ = ["cli", "main"]
