"""
Region Panel Index - target panel loading and overlap lookup.

Loads BED-style panel files (chrom, start, end, name), validates every
interval and indexes them per chromosome in an interval tree so that the
overlap query for each aligned segment costs O(log n + m) instead of a scan
over the whole panel.

Coordinates are 0-based half-open internally. A 1-based (inclusive) panel
is converted on load with ``one_based=True``; the report converts back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from operator import attrgetter
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

from intervaltree import Interval, IntervalTree

from seq2cov.constants import UNNAMED_REGION
from seq2cov.exceptions import MalformedRegion
from seq2cov.utils.logging import LogTemplates, get_logger

logger = get_logger("panel")

_HEADER_PREFIXES = ("#", "track", "browser")


@dataclass(frozen=True)
class Region:
    """One target interval of the panel."""

    chrom: str
    start: int
    end: int
    name: str
    index: int = -1  # position in the panel file

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def counted(self) -> bool:
        """Unnamed ('.') regions are reported but never accumulate depth."""
        return self.name != UNNAMED_REGION


def validate_region(region: Region, line: Optional[int] = None) -> None:
    """Raise MalformedRegion unless the region is a usable interval."""
    if not region.chrom:
        raise MalformedRegion("empty chromosome name", line=line)
    if region.start < 0:
        raise MalformedRegion(
            f"negative start {region.start} on {region.chrom}", line=line
        )
    if region.start >= region.end:
        raise MalformedRegion(
            f"start {region.start} >= end {region.end} on {region.chrom}", line=line
        )


def _parse_coordinate(value: str, column: str, line: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise MalformedRegion(f"{column} is not an integer: {value!r}", line=line) from None


def iter_bed_regions(lines: Iterable[str], one_based: bool = False) -> Iterator[Region]:
    """Parse panel lines into Regions (index not yet assigned).

    Header lines (``#``, ``track``, ``browser``) and blank lines are skipped.
    Columns beyond the fourth are ignored.
    """
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith(_HEADER_PREFIXES):
            continue

        fields = line.split("\t")
        if len(fields) < 4:
            raise MalformedRegion(
                f"expected at least 4 tab-separated columns (chrom, start, end, name), "
                f"found {len(fields)}",
                line=line_number,
            )

        chrom = fields[0].strip()
        start = _parse_coordinate(fields[1].strip(), "start", line_number)
        end = _parse_coordinate(fields[2].strip(), "end", line_number)
        if one_based:
            start -= 1

        region = Region(chrom=chrom, start=start, end=end, name=fields[3].strip())
        validate_region(region, line=line_number)
        yield region


def load_regions(path: Union[str, Path], one_based: bool = False) -> list[Region]:
    """Load a panel file in input order.

    Args:
        path: Tab-separated panel (chrom, start, end, name[, ...])
        one_based: Treat start as 1-based inclusive and convert to 0-based

    Returns:
        Regions with ``index`` set to their position in the file
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as handle:
        regions = [
            replace(region, index=i)
            for i, region in enumerate(iter_bed_regions(handle, one_based=one_based))
        ]
    logger.info(LogTemplates.FILE_LOADED.format(count=len(regions), path=path))
    return regions


class PanelIndex:
    """Read-only overlap index over the panel.

    Built once before scanning and shared by every worker without locking.
    """

    def __init__(self, regions: Sequence[Region]) -> None:
        indexed = []
        for i, region in enumerate(regions):
            validate_region(region)
            indexed.append(region if region.index == i else replace(region, index=i))
        self._regions: tuple[Region, ...] = tuple(indexed)

        grouped: dict[str, list[Region]] = {}
        for region in self._regions:
            grouped.setdefault(region.chrom, []).append(region)

        self._chromosomes: tuple[str, ...] = tuple(grouped)
        self._trees: dict[str, IntervalTree] = {
            chrom: IntervalTree(Interval(r.start, r.end, r) for r in items)
            for chrom, items in grouped.items()
        }

    @classmethod
    def build(cls, regions: Iterable[Region]) -> "PanelIndex":
        return cls(list(regions))

    @classmethod
    def load(cls, path: Union[str, Path], one_based: bool = False) -> "PanelIndex":
        return cls(load_regions(path, one_based=one_based))

    @property
    def regions(self) -> tuple[Region, ...]:
        """All regions in panel-file order."""
        return self._regions

    @property
    def chromosomes(self) -> tuple[str, ...]:
        """Chromosomes in order of first appearance in the panel."""
        return self._chromosomes

    def query(self, chrom: str, start: int, end: int) -> tuple[Region, ...]:
        """Return every region with ``region.start < end and start < region.end``.

        Results are ordered by panel-file index. An unknown chromosome or an
        empty span yields no regions.
        """
        tree = self._trees.get(chrom)
        if tree is None or start >= end:
            return ()
        hits = tree.overlap(start, end)
        return tuple(sorted((iv.data for iv in hits), key=attrgetter("index")))

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, chrom: object) -> bool:
        return chrom in self._trees

    def __repr__(self) -> str:
        return f"PanelIndex(regions={len(self._regions)}, chromosomes={len(self._chromosomes)})"
