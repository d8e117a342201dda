"""Coverage engine: panel index, segment extraction, sharding, accumulation and merge."""

from seq2cov.core.engine import CoverageEngine, ScanResult, ScanSettings, compute_coverage
from seq2cov.core.panel import PanelIndex, Region, load_regions
from seq2cov.core.segments import CoveredSegment, ReadFilter, extract_segments

__all__ = [
    "CoverageEngine",
    "CoveredSegment",
    "PanelIndex",
    "ReadFilter",
    "Region",
    "ScanResult",
    "ScanSettings",
    "compute_coverage",
    "extract_segments",
    "load_regions",
]
