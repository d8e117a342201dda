"""Utility functions (seq2cov)."""

from seq2cov.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
