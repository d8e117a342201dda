"""Tests for the seq2cov exception hierarchy."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from seq2cov.exceptions import (
    AlignmentDecodeError,
    ConfigurationError,
    MalformedRegion,
    Seq2CovError,
    UnknownChromosome,
)


class TestExceptions:
    """Messages and attributes."""

    @pytest.mark.parametrize(
        "exc_type",
        [ConfigurationError, MalformedRegion, AlignmentDecodeError, UnknownChromosome],
    )
    def test_all_derive_from_base(self, exc_type):
        assert issubclass(exc_type, Seq2CovError)

    def test_malformed_region_with_line(self):
        exc = MalformedRegion("start 5 >= end 5 on chr1", line=12)
        assert str(exc) == "line 12: start 5 >= end 5 on chr1"
        assert exc.line == 12

    def test_malformed_region_without_line(self):
        exc = MalformedRegion("bad")
        assert str(exc) == "bad"
        assert exc.line is None

    def test_unknown_chromosome_lists_sorted_names(self):
        exc = UnknownChromosome("missing", chromosomes={"chrY", "chrM"})
        assert exc.chromosomes == ["chrM", "chrY"]
        assert UnknownChromosome("missing").chromosomes == []
