"""Pytest configuration for seq2cov tests."""

import logging
import re
import sys
from pathlib import Path

import pysam
import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


DEFAULT_REFERENCES = [("chr1", 100_000), ("chr2", 50_000), ("chr3", 20_000)]

_QUERY_OPS = set("MIS=X")


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset seq2cov logger state after each test.

    setup_logging() sets propagate=False, which would break caplog in
    later tests.
    """
    yield
    app_logger = logging.getLogger("seq2cov")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


def _query_length(cigar: str) -> int:
    return sum(int(n) for n, op in re.findall(r"(\d+)([MIDNSHP=X])", cigar) if op in _QUERY_OPS)


def make_header(references=None) -> pysam.AlignmentHeader:
    references = references or DEFAULT_REFERENCES
    return pysam.AlignmentHeader.from_dict(
        {
            "HD": {"VN": "1.6", "SO": "coordinate"},
            "SQ": [{"SN": name, "LN": length} for name, length in references],
        }
    )


def make_record(
    header: pysam.AlignmentHeader,
    chrom: str,
    start: int,
    cigar: str,
    flag: int = 0,
    mapq: int = 60,
    name: str = "read",
) -> pysam.AlignedSegment:
    """Build one aligned record with a sequence matching its CIGAR."""
    record = pysam.AlignedSegment(header)
    record.query_name = name
    record.flag = flag
    record.reference_name = chrom
    record.reference_start = start
    record.mapping_quality = mapq
    record.cigarstring = cigar
    record.query_sequence = "A" * _query_length(cigar)
    return record


@pytest.fixture
def header() -> pysam.AlignmentHeader:
    return make_header()


@pytest.fixture
def record_factory(header):
    """Build records against the default header."""

    def factory(chrom, start, cigar, flag=0, mapq=60, name="read"):
        return make_record(header, chrom, start, cigar, flag=flag, mapq=mapq, name=name)

    return factory


@pytest.fixture
def write_bam(tmp_path):
    """Write a coordinate-sorted BAM from (chrom, start, cigar[, flag[, mapq]]) tuples."""

    def writer(reads, name="sample.bam", index=True, references=None):
        path = tmp_path / name
        hdr = make_header(references)
        tid = {sq: i for i, sq in enumerate(hdr.references)}
        ordered = sorted(reads, key=lambda r: (tid[r[0]], r[1]))
        with pysam.AlignmentFile(str(path), "wb", header=hdr) as out:
            for i, read in enumerate(ordered):
                chrom, start, cigar = read[:3]
                flag = read[3] if len(read) > 3 else 0
                mapq = read[4] if len(read) > 4 else 60
                out.write(make_record(out.header, chrom, start, cigar, flag, mapq, f"read{i}"))
        if index:
            pysam.index(str(path))
        return path

    return writer


@pytest.fixture
def write_bed(tmp_path):
    """Write a tab-separated panel from (chrom, start, end, name) tuples."""

    def writer(regions, name="panel.bed", header_lines=()):
        path = tmp_path / name
        lines = list(header_lines) + ["\t".join(str(v) for v in region) for region in regions]
        path.write_text("\n".join(lines) + "\n")
        return path

    return writer
