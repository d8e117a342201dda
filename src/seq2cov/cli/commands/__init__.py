"""Subcommands of the seq2cov CLI."""
