"""Version information for seq2cov."""

__version__ = "0.3.0"
__license__ = "GPL-2.0"
__description__ = "Parallel per-region read-depth coverage for targeted sequencing panels (seq2c compatible)"
