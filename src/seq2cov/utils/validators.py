"""Validation utilities for seq2cov."""

from __future__ import annotations

import importlib
from typing import List


def validate_installation() -> List[str]:
    """
    Validate seq2cov installation and dependencies.

    Returns:
        List of validation issues (empty if all good)
    """
    issues = []

    required_modules = ["pysam", "intervaltree", "pandas", "yaml", "click", "tqdm"]

    for module in required_modules:
        try:
            importlib.import_module(module)
        except ImportError:
            issues.append(f"Missing Python module: {module}")

    try:
        from seq2cov.config import Config  # noqa: F401
        from seq2cov.core.engine import CoverageEngine  # noqa: F401
        from seq2cov.core.panel import PanelIndex  # noqa: F401
    except ImportError as e:
        issues.append(f"seq2cov module import error: {e}")

    return issues
