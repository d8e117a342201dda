"""
Merge & Format - combine worker partials into the seq2c coverage table.

Output layout (tab-separated, one header line):

    Sample  Gene  Chr  Start  End  Tag  Length  MeanDepth  [Reads]

- One ``Amplicon`` row per panel region, in panel-file order
- With gene grouping, one ``Whole-Gene`` row per (chromosome, name) right
  after the last amplicon of that gene
- ``MeanDepth`` is summed depth / length with two decimals
- ``Reads`` is an optional trailing column, off by default so the table
  stays byte-identical to seq2c
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from seq2cov.constants import (
    AMPLICON_TAG,
    OUTPUT_COLUMNS,
    OUTPUT_DECIMAL_PRECISION,
    READS_COLUMN,
    WHOLE_GENE_TAG,
)
from seq2cov.core.accumulator import RegionStats
from seq2cov.core.panel import PanelIndex, Region
from seq2cov.utils.logging import LogTemplates, get_logger

logger = get_logger("report")


@dataclass
class RegionCoverage:
    """Final statistics of one region."""

    region: Region
    depth_sum: int = 0
    reads: int = 0

    def length(self, perl_length: bool = False) -> int:
        return self.region.length + 1 if perl_length else self.region.length

    def mean_depth(self, perl_length: bool = False) -> float:
        length = self.length(perl_length)
        return self.depth_sum / length if length > 0 else 0.0


@dataclass
class GeneCoverage:
    """Totals of all amplicons sharing a gene name on one chromosome."""

    chrom: str
    name: str
    start: int
    end: int
    length: int = 0
    depth_sum: int = 0
    reads: int = 0
    members: list[int] = field(default_factory=list)

    @property
    def mean_depth(self) -> float:
        return self.depth_sum / self.length if self.length > 0 else 0.0


def merge_partials(
    panel: PanelIndex,
    partials: Sequence[dict[int, RegionStats]],
) -> list[RegionCoverage]:
    """Sum per-worker partial maps into one entry per region, in panel order.

    A region may appear in several partials when reads from neighbouring
    shards reach into it, so values are added, never overwritten.
    """
    totals = [RegionStats() for _ in panel.regions]
    for partial in partials:
        for index, stats in partial.items():
            totals[index].add(stats)
    return [
        RegionCoverage(region=region, depth_sum=total.depth_sum, reads=total.reads)
        for region, total in zip(panel.regions, totals)
    ]


def group_by_gene(
    coverages: Sequence[RegionCoverage],
    perl_length: bool = False,
) -> dict[tuple[str, str], GeneCoverage]:
    """Aggregate amplicons by ``(chrom, name)`` keeping first-seen order."""
    genes: dict[tuple[str, str], GeneCoverage] = {}
    for i, cov in enumerate(coverages):
        region = cov.region
        key = (region.chrom, region.name)
        gene = genes.get(key)
        if gene is None:
            gene = genes[key] = GeneCoverage(
                chrom=region.chrom, name=region.name, start=region.start, end=region.end
            )
        gene.start = min(gene.start, region.start)
        gene.end = max(gene.end, region.end)
        gene.length += cov.length(perl_length)
        gene.depth_sum += cov.depth_sum
        gene.reads += cov.reads
        gene.members.append(i)
    return genes


def format_depth(value: float) -> str:
    return f"{value:.{OUTPUT_DECIMAL_PRECISION}f}"


def build_coverage_table(
    sample: str,
    coverages: Sequence[RegionCoverage],
    group_genes: bool = True,
    perl_length: bool = False,
    one_based: bool = False,
    read_counts: bool = False,
) -> pd.DataFrame:
    """Lay out the coverage table.

    Args:
        sample: Value of the Sample column
        coverages: Merged per-region statistics in panel order
        group_genes: Emit Whole-Gene summary rows
        perl_length: Length = end - start + 1 (seq2c.pl convention)
        one_based: Print starts 1-based, as the panel was given
        read_counts: Append the Reads column

    Returns:
        DataFrame whose columns are exactly the output header
    """
    offset = 1 if one_based else 0
    columns = OUTPUT_COLUMNS + ([READS_COLUMN] if read_counts else [])

    genes = group_by_gene(coverages, perl_length) if group_genes else {}
    closing = {gene.members[-1]: gene for gene in genes.values()}

    rows = []
    for i, cov in enumerate(coverages):
        region = cov.region
        row = [
            sample,
            region.name,
            region.chrom,
            region.start + offset,
            region.end,
            AMPLICON_TAG,
            cov.length(perl_length),
            format_depth(cov.mean_depth(perl_length)),
        ]
        if read_counts:
            row.append(cov.reads)
        rows.append(row)

        gene = closing.get(i)
        if gene is not None:
            gene_row = [
                sample,
                gene.name,
                gene.chrom,
                gene.start + offset,
                gene.end,
                WHOLE_GENE_TAG,
                gene.length,
                format_depth(gene.mean_depth),
            ]
            if read_counts:
                gene_row.append(gene.reads)
            rows.append(gene_row)

    return pd.DataFrame(rows, columns=columns)


def _default_file_mode() -> int:
    """Permission bits a plain ``open(path, "w")`` would give a new file."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_coverage_table(table: pd.DataFrame, output: Optional[Union[str, Path]] = None) -> None:
    """Write the table as TSV to ``output`` (None or '-' means stdout).

    Files are written to a temporary sibling and moved into place, so an
    interrupted run never leaves a truncated table behind.
    """
    if output is None or str(output) == "-":
        table.to_csv(sys.stdout, sep="\t", index=False, lineterminator="\n")
        return

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".tmp", dir=output.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            table.to_csv(handle, sep="\t", index=False, lineterminator="\n")
        # mkstemp creates 0600; apply the umask-derived mode instead
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, output)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(LogTemplates.FILE_CREATED.format(path=output, size=output.stat().st_size))
