"""Shared run helpers for the CLI: merge config file and command line."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from seq2cov.config import Config, load_config
from seq2cov.core.pipeline import run_coverage
from seq2cov.utils.logging import verbosity_to_level


@dataclass
class RunOptions:
    """Container for options given on the command line.

    None (or False for plain flags) means "not given": the config file or
    the built-in default decides.
    """

    bam: Optional[Path] = None
    sample_name: Optional[str] = None
    bed: Optional[Path] = None
    output: Optional[Path] = None
    config_path: Optional[Path] = None
    threads: Optional[int] = None
    strategy: Optional[str] = None
    min_mapq: Optional[int] = None
    mimic_perl_output: bool = False
    one_based: bool = False
    gene_rows: Optional[bool] = None
    read_counts: bool = False
    strict_chromosomes: bool = False
    progress: Optional[bool] = None
    log_file: Optional[Path] = None
    verbose: int = 0


def resolve_config(opts: RunOptions) -> Config:
    """CLI values override config-file values, which override defaults."""
    cfg = load_config(opts.config_path) if opts.config_path else Config()

    if opts.bam is not None:
        cfg.bam = opts.bam
    if opts.bed is not None:
        cfg.bed = opts.bed
    if opts.sample_name is not None:
        cfg.sample_name = opts.sample_name
    if opts.output is not None:
        cfg.output = opts.output
    if opts.threads is not None:
        cfg.performance.threads = opts.threads
    if opts.strategy is not None:
        cfg.performance.strategy = opts.strategy.lower()
    if opts.min_mapq is not None:
        cfg.filters.min_mapq = opts.min_mapq
    if opts.gene_rows is not None:
        cfg.group_genes = opts.gene_rows
    if opts.progress is not None:
        cfg.runtime.enable_progress = opts.progress
    if opts.log_file is not None:
        cfg.runtime.log_file = opts.log_file

    for flag in ("mimic_perl_output", "one_based", "read_counts", "strict_chromosomes"):
        if getattr(opts, flag):
            setattr(cfg, flag, True)

    return cfg


def effective_log_level(cfg: Config, verbose: int) -> int:
    """Level from the config file, made more verbose (never quieter) by -v."""
    if verbose <= 0:
        return cfg.runtime.level
    return min(cfg.runtime.level, verbosity_to_level(verbose))


def execute_run(cfg: Config, logger: logging.Logger) -> None:
    """Run one coverage computation with a resolved configuration."""
    logger.debug(f"Resolved configuration: {cfg.to_dict()}")
    run_coverage(cfg, logger)
