"""
Alignment Segment Extractor.

Turns one aligned read into the reference spans its aligned bases cover:

    M / = / X   consume read and reference -> emitted
    D / N       consume reference only     -> cursor advances, nothing emitted
    I / S / H / P  consume no reference    -> ignored

Reads rejected by the ReadFilter never reach the CIGAR walk.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, NamedTuple, Optional, Sequence

import pysam

from seq2cov.constants import DEFAULT_MIN_MAPQ

_ALIGNED_OPS = frozenset({pysam.CMATCH, pysam.CEQUAL, pysam.CDIFF})
_REFERENCE_ONLY_OPS = frozenset({pysam.CDEL, pysam.CREF_SKIP})

_FLAG_UNMAPPED = 0x4
_FLAG_SECONDARY = 0x100
_FLAG_QCFAIL = 0x200
_FLAG_DUPLICATE = 0x400
_FLAG_SUPPLEMENTARY = 0x800


class CoveredSegment(NamedTuple):
    """Reference bases [start, end) covered by aligned read bases."""

    chrom: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ReadFilter:
    """Record-level filter applied before segment extraction."""

    min_mapq: int = DEFAULT_MIN_MAPQ
    skip_unmapped: bool = True
    skip_secondary: bool = True
    skip_duplicate: bool = True
    skip_supplementary: bool = True
    skip_qcfail: bool = False

    @cached_property
    def exclude_mask(self) -> int:
        """SAM flag bits that reject a record."""
        mask = 0
        if self.skip_unmapped:
            mask |= _FLAG_UNMAPPED
        if self.skip_secondary:
            mask |= _FLAG_SECONDARY
        if self.skip_duplicate:
            mask |= _FLAG_DUPLICATE
        if self.skip_supplementary:
            mask |= _FLAG_SUPPLEMENTARY
        if self.skip_qcfail:
            mask |= _FLAG_QCFAIL
        return mask

    def passes(self, record: Any) -> bool:
        if record.flag & self.exclude_mask:
            return False
        # Unplaced reads have no reference to cover
        if record.reference_id < 0:
            return False
        return record.mapping_quality >= self.min_mapq


def extract_segments(
    record: Any,
    read_filter: Optional[ReadFilter] = None,
    coalesce: bool = True,
) -> list[CoveredSegment]:
    """Return the covered reference spans of one alignment record.

    Args:
        record: ``pysam.AlignedSegment`` (or any object with the same
            ``flag``, ``reference_id``, ``reference_name``,
            ``reference_start``, ``mapping_quality`` and ``cigartuples``)
        read_filter: Filter to apply first; None accepts every record
        coalesce: Merge abutting spans such as ``10M5=`` into one

    Returns:
        Spans in reference order; empty when filtered or without CIGAR
    """
    if read_filter is not None and not read_filter.passes(record):
        return []

    cigar = record.cigartuples
    if not cigar:
        return []

    chrom = record.reference_name
    cursor = record.reference_start
    segments: list[CoveredSegment] = []

    for op, length in cigar:
        if length <= 0:
            continue
        if op in _ALIGNED_OPS:
            end = cursor + length
            if coalesce and segments and segments[-1].end == cursor:
                segments[-1] = CoveredSegment(chrom, segments[-1].start, end)
            else:
                segments.append(CoveredSegment(chrom, cursor, end))
            cursor = end
        elif op in _REFERENCE_ONLY_OPS:
            cursor += length

    return segments


def covered_length(segments: Sequence[CoveredSegment]) -> int:
    """Total reference bases covered by the segments."""
    return sum(segment.end - segment.start for segment in segments)
