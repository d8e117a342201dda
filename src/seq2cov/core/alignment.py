"""
Alignment source - thin pysam wrapper used by the scan engine.

Exposes the header (reference names and lengths), whether a coordinate
index is available, and two record iterators:

- ``records()``: one sequential pass over the whole file (no index needed)
- ``shard_records(shard)``: indexed fetch restricted to the records a shard
  owns, each call on a fresh file handle so workers never share one

Decoder failures (truncated or corrupt BGZF, bad records) surface as
AlignmentDecodeError so a run never reports partially counted depth.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Union

import pysam

from seq2cov.core.shards import ShardRange
from seq2cov.exceptions import AlignmentDecodeError
from seq2cov.utils.logging import get_logger

logger = get_logger("alignment")


class AlignmentSource:
    """A BAM/CRAM/SAM file opened through pysam."""

    def __init__(
        self,
        path: Union[str, Path],
        io_threads: int = 1,
        reference_filename: Optional[Union[str, Path]] = None,
    ) -> None:
        self.path = Path(path)
        self.io_threads = max(1, int(io_threads))
        self.reference_filename = str(reference_filename) if reference_filename else None

        with self._open() as handle:
            self.references: tuple[str, ...] = tuple(handle.references)
            self.lengths: tuple[int, ...] = tuple(handle.lengths)
            self.has_index = self._detect_index(handle)

        logger.debug(
            f"Opened {self.path}: {len(self.references)} references, "
            f"index={'yes' if self.has_index else 'no'}"
        )

    def _open(self) -> pysam.AlignmentFile:
        try:
            return pysam.AlignmentFile(
                str(self.path),
                "r",
                threads=self.io_threads,
                reference_filename=self.reference_filename,
            )
        except (OSError, ValueError) as e:
            raise AlignmentDecodeError(f"Cannot open alignment file {self.path}: {e}") from e

    @staticmethod
    def _detect_index(handle: pysam.AlignmentFile) -> bool:
        try:
            return bool(handle.has_index())
        except (AttributeError, ValueError):
            # SAM text has no index support
            return False

    def _guarded(self, iterator: Iterator[pysam.AlignedSegment]) -> Iterator[pysam.AlignedSegment]:
        try:
            for record in iterator:
                yield record
        except (OSError, ValueError) as e:
            raise AlignmentDecodeError(f"Failed to decode {self.path}: {e}") from e

    def records(self) -> Iterator[pysam.AlignedSegment]:
        """Iterate every record in file order."""
        with self._open() as handle:
            yield from self._guarded(handle.fetch(until_eof=True))

    def shard_records(self, shard: ShardRange) -> Iterator[pysam.AlignedSegment]:
        """Iterate the records whose leftmost position lies in ``shard``."""
        with self._open() as handle:
            for contig, start, end in shard.spans(self.references, self.lengths):
                try:
                    fetched = handle.fetch(contig, start, end)
                except (OSError, ValueError) as e:
                    raise AlignmentDecodeError(
                        f"Indexed fetch {contig}:{start}-{end} failed on {self.path}: {e}"
                    ) from e
                for record in self._guarded(fetched):
                    if shard.contains(record.reference_id, record.reference_start):
                        yield record

    def __repr__(self) -> str:
        return f"AlignmentSource({str(self.path)!r}, has_index={self.has_index})"
