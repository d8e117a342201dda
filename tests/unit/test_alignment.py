"""Tests for the pysam-backed alignment source."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from seq2cov.core.alignment import AlignmentSource
from seq2cov.core.panel import PanelIndex, Region
from seq2cov.core.shards import plan_shards
from seq2cov.exceptions import AlignmentDecodeError


READS = [
    ("chr1", 10, "50M"),
    ("chr1", 95, "30M"),
    ("chr1", 105, "20M"),
    ("chr1", 2_000, "10M1000N10M"),
    ("chr2", 0, "40M"),
    ("chr2", 4_990, "20M"),
    ("chr3", 123, "5S25M"),
]


class TestAlignmentSource:
    """Header, index detection and iteration."""

    def test_header_and_index(self, write_bam):
        source = AlignmentSource(write_bam(READS))
        assert source.references == ("chr1", "chr2", "chr3")
        assert source.lengths == (100_000, 50_000, 20_000)
        assert source.has_index is True

    def test_unindexed(self, write_bam):
        source = AlignmentSource(write_bam(READS, index=False))
        assert source.has_index is False

    def test_records_in_file_order(self, write_bam):
        source = AlignmentSource(write_bam(READS, index=False))
        loci = [(r.reference_name, r.reference_start) for r in source.records()]
        assert loci == [(c, s) for c, s, _ in READS]

    def test_records_can_be_iterated_twice(self, write_bam):
        source = AlignmentSource(write_bam(READS))
        assert len(list(source.records())) == len(list(source.records())) == len(READS)

    @pytest.mark.parametrize("threads", [1, 2, 3, 7])
    def test_shard_records_partition_the_file(self, write_bam, threads):
        source = AlignmentSource(write_bam(READS))
        panel = PanelIndex.build([
            Region("chr1", 0, 100, "a"),
            Region("chr1", 100, 200, "b"),
            Region("chr2", 0, 5_000, "c"),
            Region("chr3", 100, 200, "d"),
        ])
        shards = plan_shards(threads, source.references, panel)

        seen = []
        for shard in shards:
            for record in source.shard_records(shard):
                assert shard.contains(record.reference_id, record.reference_start)
                seen.append(record.query_name)

        # Each record is owned by exactly one shard, including reads that
        # overlap a shard boundary
        assert sorted(seen) == sorted(f"read{i}" for i in range(len(READS)))

    def test_missing_file(self, tmp_path):
        with pytest.raises(AlignmentDecodeError, match="Cannot open"):
            AlignmentSource(tmp_path / "nope.bam")

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "garbage.bam"
        path.write_text("this is not an alignment\n")
        with pytest.raises(AlignmentDecodeError):
            AlignmentSource(path)

    def test_truncated_file(self, write_bam):
        reads = [("chr1", i * 3, "100M") for i in range(5_000)]
        path = write_bam(reads, index=False)
        data = path.read_bytes()
        path.write_bytes(data[: len(data) * 3 // 5])

        with pytest.raises(AlignmentDecodeError):
            source = AlignmentSource(path)
            for _ in source.records():
                pass
