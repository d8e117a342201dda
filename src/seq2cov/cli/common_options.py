"""Shared Click options for the seq2cov CLI.

Short flags follow the legacy seq2c coverage tool (-b, -N, -p).
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

from seq2cov.constants import SCAN_STRATEGIES

F = TypeVar("F", bound=Callable[..., None])


def bam_option(func: F) -> F:
    """Alignment file option."""
    return click.option(
        "-b",
        "--bam",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Coordinate-sorted BAM/CRAM file (index optional)",
    )(func)


def sample_option(func: F) -> F:
    """Sample name option."""
    return click.option(
        "-N",
        "--sample-name",
        default=None,
        help="Sample name written to the Sample column",
    )(func)


def bed_option(func: F) -> F:
    """Panel region file option."""
    return click.option(
        "-p",
        "--bed",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Panel regions: chrom, start, end, gene (tab-separated)",
    )(func)


def output_option(func: F) -> F:
    """Output table option."""
    return click.option(
        "-o",
        "--output",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Output TSV [default: stdout]",
    )(func)


def config_option(func: F) -> F:
    """Configuration file option."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file (YAML)",
    )(func)


def threads_option(func: F) -> F:
    """Threads option."""
    return click.option(
        "-t",
        "--threads",
        type=click.IntRange(min=1),
        default=None,
        help="Number of worker threads [default: 1]",
    )(func)


def strategy_option(func: F) -> F:
    """Scan strategy option."""
    return click.option(
        "--strategy",
        type=click.Choice(list(SCAN_STRATEGIES), case_sensitive=False),
        default=None,
        help="How workers read the BAM: indexed fetch or one streaming pass [default: auto]",
    )(func)


def min_mapq_option(func: F) -> F:
    """Mapping quality filter option."""
    return click.option(
        "--min-mapq",
        type=click.IntRange(min=0),
        default=None,
        help="Skip reads with mapping quality below this [default: 0]",
    )(func)


def verbose_option(func: F) -> F:
    """Verbosity option (unified: use -v/--verbose everywhere)."""
    return click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )(func)


def log_file_option(func: F) -> F:
    """Log file option."""
    return click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Path for log file output",
    )(func)


def flag_options(func: F) -> F:
    """Output convention switches."""
    options = [
        click.option(
            "--mimic-perl-output",
            is_flag=True,
            default=False,
            help="Report Length as end - start + 1 like seq2c.pl",
        ),
        click.option(
            "--one-based",
            is_flag=True,
            default=False,
            help="Panel starts are 1-based inclusive",
        ),
        click.option(
            "--gene-rows/--no-gene-rows",
            default=None,
            help="Add Whole-Gene summary rows [default: on]",
        ),
        click.option(
            "--read-counts",
            is_flag=True,
            default=False,
            help="Append a Reads column with overlapping read counts",
        ),
        click.option(
            "--strict-chromosomes",
            is_flag=True,
            default=False,
            help="Fail when panel chromosomes are missing from the BAM header",
        ),
        click.option(
            "--progress/--no-progress",
            default=None,
            help="Show progress bars on stderr [default: on]",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def coverage_options(func: F) -> F:
    """Every option of a coverage run."""
    for decorator in reversed(
        [
            bam_option,
            sample_option,
            bed_option,
            output_option,
            config_option,
            threads_option,
            strategy_option,
            min_mapq_option,
            flag_options,
            verbose_option,
            log_file_option,
        ]
    ):
        func = decorator(func)
    return func
