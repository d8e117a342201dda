"""Per-worker coverage accumulation against the shared panel index."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from seq2cov.core.panel import PanelIndex
from seq2cov.core.segments import CoveredSegment


@dataclass
class RegionStats:
    """Running totals for one region."""

    depth_sum: int = 0
    reads: int = 0

    def add(self, other: "RegionStats") -> None:
        self.depth_sum += other.depth_sum
        self.reads += other.reads


class CoverageAccumulator:
    """Private accumulator owned by exactly one worker.

    Only touches its own map; the panel index is read-only and shared.
    """

    def __init__(self, panel: PanelIndex) -> None:
        self.panel = panel
        self.stats: dict[int, RegionStats] = {}
        self.unknown_chromosomes: set[str] = set()
        self.records_seen = 0

    def _overlap(self, segment: CoveredSegment, touched: set[int] | None) -> None:
        regions = self.panel.query(segment.chrom, segment.start, segment.end)
        if not regions and segment.chrom not in self.panel:
            self.unknown_chromosomes.add(segment.chrom)
            return

        for region in regions:
            if not region.counted:
                continue
            stats = self.stats.get(region.index)
            if stats is None:
                stats = self.stats[region.index] = RegionStats()
            stats.depth_sum += min(segment.end, region.end) - max(segment.start, region.start)
            if touched is None:
                stats.reads += 1
            elif region.index not in touched:
                touched.add(region.index)
                stats.reads += 1

    def observe(self, segment: CoveredSegment) -> None:
        """Count one segment as one read."""
        self._overlap(segment, None)

    def observe_record(self, segments: Iterable[CoveredSegment]) -> None:
        """Count all segments of one record; each region's read count rises once."""
        touched: set[int] = set()
        for segment in segments:
            self._overlap(segment, touched)
        self.records_seen += 1

    def partial(self) -> dict[int, RegionStats]:
        """Per-region totals keyed by panel index."""
        return self.stats
