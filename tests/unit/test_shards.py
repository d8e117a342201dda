"""Tests for the shard planner."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from seq2cov.core.panel import PanelIndex, Region
from seq2cov.core.shards import (
    GENOME_END,
    GENOME_START,
    ShardLocator,
    ShardRange,
    plan_shards,
)
from seq2cov.exceptions import ConfigurationError

REFERENCES = ["chr1", "chr2", "chr3"]
LENGTHS = [10_000, 5_000, 2_000]


def _dense_panel():
    regions = [Region("chr1", i * 10, i * 10 + 5, f"a{i}") for i in range(90)]
    regions += [Region("chr3", 0, 1500, "big"), Region("chr2", 100, 200, "mid")]
    return PanelIndex.build(regions)


def _assert_partition(shards):
    assert shards[0].start == GENOME_START
    assert shards[-1].end == GENOME_END
    for left, right in zip(shards, shards[1:]):
        assert left.end == right.start
        assert left.start < left.end
    assert [s.index for s in shards] == list(range(len(shards)))


class TestPlanShards:
    """Partition properties."""

    @pytest.mark.parametrize("threads", [1, 2, 3, 4, 8, 200])
    def test_shards_partition_genome(self, threads):
        shards = plan_shards(threads, REFERENCES, _dense_panel())
        _assert_partition(shards)
        assert 1 <= len(shards) <= threads

    def test_single_thread_single_shard(self):
        shards = plan_shards(1, REFERENCES, _dense_panel())
        assert shards == [ShardRange(0, GENOME_START, GENOME_END)]

    def test_balances_by_region_count(self):
        panel = _dense_panel()
        shards = plan_shards(4, REFERENCES, panel)
        tid = {name: i for i, name in enumerate(REFERENCES)}
        counts = [
            sum(1 for r in panel.regions if shard.contains(tid[r.chrom], r.start))
            for shard in shards
        ]
        assert len(shards) == 4
        assert sum(counts) == len(panel)
        assert max(counts) - min(counts) <= 1
        # The dense chromosome is split even though chr3 holds the longest region
        assert shards[1].start[0] == 0

    def test_empty_panel_gives_one_shard(self):
        shards = plan_shards(8, REFERENCES, PanelIndex.build([]))
        assert len(shards) == 1
        _assert_partition(shards)

    def test_regions_on_unknown_chromosomes_ignored(self):
        panel = PanelIndex.build([Region("chrUn", 0, 10, "x"), Region("chr1", 0, 10, "y")])
        shards = plan_shards(4, REFERENCES, panel)
        assert len(shards) == 1

    def test_duplicate_starts_do_not_produce_empty_shards(self):
        panel = PanelIndex.build([Region("chr1", 100, 110 + i, f"r{i}") for i in range(10)])
        shards = plan_shards(4, REFERENCES, panel)
        _assert_partition(shards)
        assert len(shards) == 2

    def test_invalid_thread_count(self):
        with pytest.raises(ConfigurationError):
            plan_shards(0, REFERENCES, _dense_panel())


class TestShardRange:
    """Ownership and span decomposition."""

    def test_contains_is_half_open(self):
        shard = ShardRange(1, (0, 500), (1, 100))
        assert shard.contains(0, 500)
        assert shard.contains(0, 9_999)
        assert shard.contains(1, 99)
        assert not shard.contains(1, 100)
        assert not shard.contains(0, 499)

    def test_spans_cross_chromosomes(self):
        shard = ShardRange(1, (0, 500), (2, 100))
        assert shard.spans(REFERENCES, LENGTHS) == [
            ("chr1", 500, 10_000),
            ("chr2", 0, 5_000),
            ("chr3", 0, 100),
        ]

    def test_spans_to_genome_end(self):
        shard = ShardRange(2, (1, 4_000), GENOME_END)
        assert shard.spans(REFERENCES, LENGTHS) == [
            ("chr2", 4_000, 5_000),
            ("chr3", 0, 2_000),
        ]

    def test_spans_skip_empty_pieces(self):
        shard = ShardRange(0, GENOME_START, (1, 0))
        assert shard.spans(REFERENCES, LENGTHS) == [("chr1", 0, 10_000)]

    def test_describe(self):
        shard = ShardRange(3, (1, 10), GENOME_END)
        assert shard.describe(REFERENCES) == "shard 3 [chr2:10, end)"


class TestShardLocator:
    """Every locus maps to exactly one shard."""

    def test_locate_matches_contains(self):
        shards = plan_shards(5, REFERENCES, _dense_panel())
        locator = ShardLocator(shards)
        for tid, length in enumerate(LENGTHS):
            for pos in range(0, length, 37):
                owner = locator.locate(tid, pos)
                assert owner.contains(tid, pos)
                assert sum(1 for s in shards if s.contains(tid, pos)) == 1

    def test_requires_shards(self):
        with pytest.raises(ValueError):
            ShardLocator([])
