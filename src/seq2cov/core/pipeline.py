"""End-to-end coverage run: panel -> scan -> merge -> table."""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from seq2cov.config import Config
from seq2cov.core.alignment import AlignmentSource
from seq2cov.core.engine import CoverageEngine, ScanResult
from seq2cov.core.panel import PanelIndex
from seq2cov.core.report import build_coverage_table, write_coverage_table
from seq2cov.utils.logging import get_logger


class CoveragePipeline:
    """Runs one sample through the coverage engine.

    Nothing is written until the merge is complete, so a failing scan
    never leaves an output table behind.
    """

    def __init__(self, config: Config, logger: Optional[logging.Logger] = None) -> None:
        config.validate()
        self.config = config
        self.logger = logger or get_logger(self.__class__.__name__)
        self.result: Optional[ScanResult] = None

    def scan(self) -> ScanResult:
        cfg = self.config
        panel = PanelIndex.load(cfg.bed, one_based=cfg.one_based)
        source = AlignmentSource(cfg.bam, io_threads=cfg.performance.io_threads)
        engine = CoverageEngine(panel, cfg.scan_settings())
        self.result = engine.run(source)
        return self.result

    def table(self) -> pd.DataFrame:
        if self.result is None:
            self.scan()
        cfg = self.config
        return build_coverage_table(
            cfg.sample_name,
            self.result.coverages,
            group_genes=cfg.group_genes,
            perl_length=cfg.mimic_perl_output,
            one_based=cfg.one_based,
            read_counts=cfg.read_counts,
        )

    def run(self) -> pd.DataFrame:
        table = self.table()
        write_coverage_table(table, self.config.output)
        self.logger.info(
            f"Wrote {len(table):,} rows for sample {self.config.sample_name} "
            f"({self.result.strategy} strategy, {len(self.result.shards)} shard(s))"
        )
        return table


def run_coverage(config: Config, logger: Optional[logging.Logger] = None) -> pd.DataFrame:
    """Validate ``config``, compute coverage and write the table."""
    return CoveragePipeline(config, logger).run()
