"""
Shard Planner - split the genome into disjoint worker ranges.

A locus is ``(tid, pos)`` where ``tid`` follows the reference order of the
alignment header, so the genome is one ordered coordinate line and a shard
may span chromosome boundaries. Shards are half-open in locus order, sorted,
disjoint, and together cover every locus. A record belongs to the shard that
contains its leftmost mapped position and to no other.

Cut points sit at region starts so each shard gets about the same number of
panel regions, whatever the regions' spread across the genome.
"""

from __future__ import annotations

import sys
from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence

from seq2cov.core.panel import PanelIndex
from seq2cov.exceptions import ConfigurationError

Locus = tuple[int, int]

GENOME_START: Locus = (0, 0)
GENOME_END: Locus = (sys.maxsize, 0)


@dataclass(frozen=True)
class ShardRange:
    """Half-open locus range ``[start, end)`` owned by one worker."""

    index: int
    start: Locus
    end: Locus

    def contains(self, tid: int, pos: int) -> bool:
        return self.start <= (tid, pos) < self.end

    def spans(self, references: Sequence[str], lengths: Sequence[int]) -> list[tuple[str, int, int]]:
        """Per-chromosome ``(name, start, end)`` pieces for indexed fetches."""
        pieces = []
        last_tid = min(self.end[0], len(references) - 1)
        for tid in range(self.start[0], last_tid + 1):
            lo = self.start[1] if tid == self.start[0] else 0
            hi = lengths[tid]
            if tid == self.end[0]:
                hi = min(hi, self.end[1])
            if lo < hi:
                pieces.append((references[tid], lo, hi))
        return pieces

    def describe(self, references: Sequence[str]) -> str:
        def fmt(locus: Locus) -> str:
            tid, pos = locus
            if tid >= len(references):
                return "end"
            return f"{references[tid]}:{pos}"

        return f"shard {self.index} [{fmt(self.start)}, {fmt(self.end)})"


def plan_shards(
    thread_count: int,
    references: Sequence[str],
    panel: PanelIndex,
) -> list[ShardRange]:
    """Partition the genome into at most ``thread_count`` shards.

    Args:
        thread_count: Number of workers available (>= 1)
        references: Reference names in alignment-header order
        panel: Region index used as the density profile

    Returns:
        Ordered shards covering ``[GENOME_START, GENOME_END)``
    """
    if thread_count < 1:
        raise ConfigurationError("Thread count must be >= 1")

    tid_of = {name: tid for tid, name in enumerate(references)}
    starts = sorted(
        (tid_of[region.chrom], region.start)
        for region in panel.regions
        if region.chrom in tid_of
    )

    n_shards = min(thread_count, max(1, len(starts)))
    cuts: list[Locus] = []
    for k in range(1, n_shards):
        locus = starts[(k * len(starts)) // n_shards]
        if locus > GENOME_START and (not cuts or locus > cuts[-1]):
            cuts.append(locus)

    bounds = [GENOME_START, *cuts, GENOME_END]
    return [
        ShardRange(index=i, start=lo, end=hi)
        for i, (lo, hi) in enumerate(zip(bounds, bounds[1:]))
    ]


class ShardLocator:
    """Bisect lookup from a record's leftmost locus to its owning shard."""

    def __init__(self, shards: Sequence[ShardRange]) -> None:
        if not shards:
            raise ValueError("ShardLocator needs at least one shard")
        self._shards = list(shards)
        self._starts = [shard.start for shard in self._shards]

    def locate(self, tid: int, pos: int) -> ShardRange:
        i = bisect_right(self._starts, (tid, pos)) - 1
        return self._shards[max(i, 0)]
