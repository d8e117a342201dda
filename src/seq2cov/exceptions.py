"""Custom exceptions for seq2cov."""

from __future__ import annotations

from typing import Optional


class Seq2CovError(Exception):
    """Base exception for all seq2cov errors."""

    pass


class ConfigurationError(Seq2CovError):
    """Raised when configuration is invalid or missing."""

    pass


class MalformedRegion(Seq2CovError):
    """Raised when a panel region has invalid coordinates or fields."""

    def __init__(self, message: str = "", line: Optional[int] = None):
        """Initialize MalformedRegion with the offending input line.

        Args:
            message: Error message
            line: 1-based line number in the region file, if known
        """
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class AlignmentDecodeError(Seq2CovError):
    """Raised when alignment data is corrupt, truncated or unreadable."""

    pass


class UnknownChromosome(Seq2CovError):
    """Raised (strict mode only) when panel and alignment references disagree."""

    def __init__(self, message: str = "", chromosomes=None):
        super().__init__(message)
        self.chromosomes = sorted(chromosomes or [])
