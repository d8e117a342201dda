"""seq2cov: seq2c-compatible panel coverage from BAM files."""

from seq2cov.__version__ import __version__

__all__ = ["__version__"]
