"""
Coverage scan engine.

Builds the shard plan, runs one worker per shard and merges their private
accumulators. Two ways of feeding the workers:

- ``indexed``: every worker opens its own handle and fetches only the
  records its shard owns (needs a .bai/.csi/.crai index)
- ``stream``: the calling thread decodes the file once and hands batches of
  records to the owning worker through a bounded queue; a full queue blocks
  the reader, never the other workers

``auto`` picks ``indexed`` when an index exists. Both give the same result
for any thread count.
"""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from seq2cov.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_THREADS,
    SCAN_STRATEGIES,
)
from seq2cov.core.accumulator import CoverageAccumulator, RegionStats
from seq2cov.core.panel import PanelIndex
from seq2cov.core.report import RegionCoverage, merge_partials
from seq2cov.core.segments import ReadFilter, extract_segments
from seq2cov.core.shards import ShardLocator, ShardRange, plan_shards
from seq2cov.exceptions import ConfigurationError, UnknownChromosome
from seq2cov.utils.logging import LogTemplates, get_logger
from seq2cov.utils.progress import iter_progress

logger = get_logger("engine")

_SENTINEL = object()
_PUT_TIMEOUT = 0.1


@dataclass(frozen=True)
class ScanSettings:
    """Immutable settings handed to the engine."""

    threads: int = DEFAULT_THREADS
    queue_size: int = DEFAULT_QUEUE_SIZE
    batch_size: int = DEFAULT_BATCH_SIZE
    strategy: str = "auto"
    read_filter: ReadFilter = field(default_factory=ReadFilter)
    strict_chromosomes: bool = False
    enable_progress: bool = False

    def __post_init__(self) -> None:
        if self.threads < 1:
            raise ConfigurationError("Threads must be >= 1")
        if self.queue_size < 1:
            raise ConfigurationError("queue_size must be >= 1")
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")
        if self.strategy not in SCAN_STRATEGIES:
            raise ConfigurationError(
                f"Unknown scan strategy {self.strategy!r}; "
                f"choose from {', '.join(SCAN_STRATEGIES)}"
            )


@dataclass
class ShardOutput:
    """What one worker hands back after its shard is done."""

    shard: ShardRange
    stats: dict[int, RegionStats]
    records: int = 0
    counted: int = 0
    unknown_chromosomes: set[str] = field(default_factory=set)


@dataclass
class ScanResult:
    """Merged outcome of a scan."""

    coverages: list[RegionCoverage]
    strategy: str
    shards: list[ShardRange]
    records: int = 0
    counted: int = 0
    duration: float = 0.0
    missing_chromosomes: list[str] = field(default_factory=list)


class _WorkerGone(Exception):
    """A stream worker stopped before its queue was closed."""


class CoverageEngine:
    """Parallel per-region coverage over one alignment source.

    The source needs ``references``, ``lengths``, ``has_index``,
    ``records()`` and, for the indexed strategy, ``shard_records(shard)``
    (see ``seq2cov.core.alignment.AlignmentSource``).
    """

    def __init__(self, panel: PanelIndex, settings: Optional[ScanSettings] = None) -> None:
        self.panel = panel
        self.settings = settings or ScanSettings()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def resolve_strategy(self, source: Any) -> str:
        strategy = self.settings.strategy
        if strategy == "auto":
            return "indexed" if source.has_index else "stream"
        if strategy == "indexed" and not source.has_index:
            raise ConfigurationError(
                "The indexed strategy needs an alignment index; "
                "run 'samtools index' or use --strategy stream"
            )
        return strategy

    def run(self, source: Any) -> ScanResult:
        start_time = time.monotonic()
        missing = self._check_chromosomes(source.references)
        strategy = self.resolve_strategy(source)
        shards = plan_shards(self.settings.threads, source.references, self.panel)

        if len(self.panel) == 0:
            logger.warning("Panel is empty; nothing to scan")
            return ScanResult(
                coverages=[], strategy=strategy, shards=shards, missing_chromosomes=missing
            )

        logger.info(
            LogTemplates.SCAN_START.format(
                path=getattr(source, "path", source), shards=len(shards), strategy=strategy
            )
        )
        for shard in shards:
            logger.debug(shard.describe(source.references))

        if strategy == "indexed":
            outputs = self._run_indexed(source, shards)
        else:
            outputs = self._run_stream(source, shards)

        coverages = merge_partials(self.panel, [out.stats for out in outputs])
        result = ScanResult(
            coverages=coverages,
            strategy=strategy,
            shards=shards,
            records=sum(out.records for out in outputs),
            counted=sum(out.counted for out in outputs),
            duration=time.monotonic() - start_time,
            missing_chromosomes=missing,
        )
        self._log_summary(result, outputs)
        return result

    # ------------------------------------------------------------------ #
    # Workers
    # ------------------------------------------------------------------ #

    def _feed(self, accumulator: CoverageAccumulator, records: Iterable[Any]) -> int:
        read_filter = self.settings.read_filter
        seen = 0
        for record in records:
            seen += 1
            segments = extract_segments(record, read_filter)
            if segments:
                accumulator.observe_record(segments)
        return seen

    @staticmethod
    def _output(shard: ShardRange, accumulator: CoverageAccumulator, seen: int) -> ShardOutput:
        return ShardOutput(
            shard=shard,
            stats=accumulator.partial(),
            records=seen,
            counted=accumulator.records_seen,
            unknown_chromosomes=accumulator.unknown_chromosomes,
        )

    def _accumulate(self, shard: ShardRange, records: Iterable[Any]) -> ShardOutput:
        accumulator = CoverageAccumulator(self.panel)
        seen = self._feed(accumulator, records)
        return self._output(shard, accumulator, seen)

    def _run_indexed(self, source: Any, shards: Sequence[ShardRange]) -> list[ShardOutput]:
        with ThreadPoolExecutor(
            max_workers=len(shards), thread_name_prefix="seq2cov-shard"
        ) as pool:
            futures = [
                pool.submit(self._accumulate, shard, source.shard_records(shard))
                for shard in shards
            ]
            for future in iter_progress(
                as_completed(futures),
                total=len(futures),
                desc="shards",
                enabled=self.settings.enable_progress,
            ):
                # Fail fast; the pool still waits for running shards on exit
                future.result()
            return [future.result() for future in futures]

    def _consume(self, shard: ShardRange, inbox: queue.Queue, stop: threading.Event) -> ShardOutput:
        accumulator = CoverageAccumulator(self.panel)
        seen = 0
        while True:
            batch = inbox.get()
            if batch is _SENTINEL:
                break
            if stop.is_set():
                continue
            seen += self._feed(accumulator, batch)
        return self._output(shard, accumulator, seen)

    @staticmethod
    def _put(inbox: queue.Queue, item: Any, worker: Future) -> None:
        """Blocking put that gives up if the consuming worker has died."""
        while True:
            try:
                inbox.put(item, timeout=_PUT_TIMEOUT)
                return
            except queue.Full:
                if worker.done():
                    raise _WorkerGone()

    def _run_stream(self, source: Any, shards: Sequence[ShardRange]) -> list[ShardOutput]:
        locator = ShardLocator(shards)
        batch_size = self.settings.batch_size
        inboxes = [queue.Queue(maxsize=self.settings.queue_size) for _ in shards]
        pending: list[list[Any]] = [[] for _ in shards]
        stop = threading.Event()
        skipped = 0

        with ThreadPoolExecutor(
            max_workers=len(shards), thread_name_prefix="seq2cov-shard"
        ) as pool:
            workers = [
                pool.submit(self._consume, shard, inbox, stop)
                for shard, inbox in zip(shards, inboxes)
            ]
            try:
                for record in iter_progress(
                    source.records(),
                    desc="reads",
                    unit="reads",
                    enabled=self.settings.enable_progress,
                ):
                    tid = record.reference_id
                    if tid < 0:
                        skipped += 1
                        continue
                    i = locator.locate(tid, record.reference_start).index
                    pending[i].append(record)
                    if len(pending[i]) >= batch_size:
                        self._put(inboxes[i], pending[i], workers[i])
                        pending[i] = []
                for i, batch in enumerate(pending):
                    if batch:
                        self._put(inboxes[i], batch, workers[i])
            except _WorkerGone:
                stop.set()
            except BaseException:
                stop.set()
                raise
            finally:
                for inbox, worker in zip(inboxes, workers):
                    try:
                        self._put(inbox, _SENTINEL, worker)
                    except _WorkerGone:
                        pass

            # Re-raises the first worker failure, if any
            outputs = [worker.result() for worker in workers]

        if outputs:
            outputs[0].records += skipped
        return outputs

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def _check_chromosomes(self, references: Sequence[str]) -> list[str]:
        known = set(references)
        missing = [chrom for chrom in self.panel.chromosomes if chrom not in known]
        if not missing:
            return missing
        if self.settings.strict_chromosomes:
            raise UnknownChromosome(
                f"Panel chromosome(s) not in alignment header: {', '.join(missing)}",
                chromosomes=missing,
            )
        logger.warning(
            LogTemplates.UNKNOWN_CHROMOSOMES.format(count=len(missing), names=", ".join(missing))
        )
        return missing

    def _log_summary(self, result: ScanResult, outputs: Sequence[ShardOutput]) -> None:
        for out in outputs:
            logger.debug(LogTemplates.SHARD_DONE.format(shard=out.shard.index, records=out.records))

        off_panel: set[str] = set()
        for out in outputs:
            off_panel |= out.unknown_chromosomes
        if off_panel:
            logger.debug(f"Reads on {len(off_panel)} chromosome(s) without panel regions")

        removed = result.records - result.counted
        percent = (result.counted / result.records * 100) if result.records else 0.0
        logger.info(
            LogTemplates.FILTERING_STATS.format(kept=result.counted, removed=removed, percent=percent)
        )
        logger.info(
            LogTemplates.SCAN_DONE.format(
                duration=result.duration, records=result.records, kept=result.counted
            )
        )


def compute_coverage(
    panel: PanelIndex,
    source: Any,
    settings: Optional[ScanSettings] = None,
) -> ScanResult:
    """Run a full scan of ``source`` against ``panel``."""
    return CoverageEngine(panel, settings).run(source)
