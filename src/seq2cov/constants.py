"""Unified constants for seq2cov.

Defaults here mirror the legacy seq2c coverage tool so that output stays
byte-compatible unless the user asks otherwise.
"""

# ================== Read Filtering ==================
# The legacy tool has no MAPQ gate
DEFAULT_MIN_MAPQ: int = 0

# ================== Output Schema ==================
OUTPUT_COLUMNS = ["Sample", "Gene", "Chr", "Start", "End", "Tag", "Length", "MeanDepth"]
READS_COLUMN = "Reads"

AMPLICON_TAG = "Amplicon"
WHOLE_GENE_TAG = "Whole-Gene"

# Regions with this name are reported but never accumulate coverage
UNNAMED_REGION = "."

# Decimal precision of MeanDepth
OUTPUT_DECIMAL_PRECISION: int = 2

# ================== Scheduling ==================
DEFAULT_THREADS: int = 1
# Per-worker queue bound (in batches) for the streaming strategy
DEFAULT_QUEUE_SIZE: int = 64
# Records per batch handed from the reader to a worker
DEFAULT_BATCH_SIZE: int = 256

SCAN_STRATEGIES = ("auto", "indexed", "stream")
