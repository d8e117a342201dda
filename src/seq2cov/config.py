"""Configuration management for seq2cov."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from seq2cov.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MIN_MAPQ,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_THREADS,
    SCAN_STRATEGIES,
)
from seq2cov.core.engine import ScanSettings
from seq2cov.core.segments import ReadFilter
from seq2cov.exceptions import ConfigurationError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    # Enable tqdm progress where available
    enable_progress: bool = True

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.WARNING)


@dataclass
class PerformanceConfig:
    """Performance-related configuration."""

    threads: int = DEFAULT_THREADS
    # BGZF decompression threads per open file handle
    io_threads: int = 1
    queue_size: int = DEFAULT_QUEUE_SIZE
    batch_size: int = DEFAULT_BATCH_SIZE
    strategy: str = "auto"


@dataclass
class FilterConfig:
    """Read filters applied before CIGAR walking."""

    min_mapq: int = DEFAULT_MIN_MAPQ
    skip_unmapped: bool = True
    skip_secondary: bool = True
    skip_duplicate: bool = True
    skip_supplementary: bool = True
    skip_qcfail: bool = False


@dataclass
class Config:
    """Main configuration class."""

    # Required parameters (set via CLI or config file)
    bam: Optional[Path] = None
    bed: Optional[Path] = None
    sample_name: Optional[str] = None
    output: Optional[Path] = None

    # Panel / output conventions
    one_based: bool = False
    mimic_perl_output: bool = False
    group_genes: bool = True
    read_counts: bool = False
    strict_chromosomes: bool = False

    # Sub-configurations
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)

    def validate(self) -> None:
        """Validate configuration."""
        if not self.bam:
            raise ConfigurationError("Alignment file (--bam) is required")
        if not self.bed:
            raise ConfigurationError("Region file (--bed) is required")
        if not self.sample_name:
            raise ConfigurationError("Sample name (--sample-name) is required")
        if not Path(self.bam).exists():
            raise ConfigurationError(f"Alignment file not found: {self.bam}")
        if not Path(self.bed).exists():
            raise ConfigurationError(f"Region file not found: {self.bed}")

        # Validate numeric ranges
        if self.performance.threads < 1:
            raise ConfigurationError("Threads must be >= 1")
        if self.performance.io_threads < 1:
            raise ConfigurationError("io_threads must be >= 1")
        if self.performance.queue_size < 1:
            raise ConfigurationError("queue_size must be >= 1")
        if self.performance.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1")
        if self.performance.strategy not in SCAN_STRATEGIES:
            raise ConfigurationError(
                f"Invalid strategy {self.performance.strategy!r}: "
                f"expected one of {', '.join(SCAN_STRATEGIES)}"
            )
        if self.filters.min_mapq < 0:
            raise ConfigurationError("min_mapq must be >= 0")
        if self.runtime.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.runtime.log_level}")

    def read_filter(self) -> ReadFilter:
        return ReadFilter(**asdict(self.filters))

    def scan_settings(self) -> ScanSettings:
        """Freeze the scan-relevant part of the configuration."""
        return ScanSettings(
            threads=self.performance.threads,
            queue_size=self.performance.queue_size,
            batch_size=self.performance.batch_size,
            strategy=self.performance.strategy,
            read_filter=self.read_filter(),
            strict_chromosomes=self.strict_chromosomes,
            enable_progress=self.runtime.enable_progress,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


_PATH_KEYS = {"bam", "bed", "output"}
# Section options holding an optional path
_SECTION_PATH_KEYS = {"log_file"}
_SCALAR_KEYS = {
    "sample_name": str,
    "one_based": bool,
    "mimic_perl_output": bool,
    "group_genes": bool,
    "read_counts": bool,
    "strict_chromosomes": bool,
}
_TYPE_NAMES = {bool: "true or false", int: "an integer", str: "a string"}


def _checked(option: str, value: Any, expected: type) -> Any:
    """Return ``value`` if YAML parsed it as ``expected``, else raise."""
    # bool is a subclass of int; `threads: yes` is not a thread count
    if (expected is int and isinstance(value, bool)) or not isinstance(value, expected):
        hint = " (quote it in YAML)" if expected is str else ""
        raise ConfigurationError(
            f"Option '{option}' must be {_TYPE_NAMES[expected]}{hint}, got {value!r}"
        )
    return value


def _checked_path(option: str, value: Any) -> Optional[Path]:
    if value is None:
        return None
    return Path(_checked(option, value, str))


def _apply_section(target: Any, section: str, values: Optional[Dict[str, Any]]) -> None:
    if values is None:
        return
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{section}' must be a mapping")
    known = {f.name: f for f in fields(target)}
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigurationError(
            f"Unsupported option(s) in '{section}': " + ", ".join(unknown)
        )
    for key, value in values.items():
        option = f"{section}.{key}"
        if key in _SECTION_PATH_KEYS:
            value = _checked_path(option, value)
        else:
            value = _checked(option, value, type(known[key].default))
        setattr(target, key, value)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a Config from a parsed YAML mapping."""
    cfg = Config()
    sections = {"runtime", "performance", "filters"}

    unknown = sorted(set(data) - _PATH_KEYS - set(_SCALAR_KEYS) - sections - {"threads"})
    if unknown:
        raise ConfigurationError("Unsupported config option(s): " + ", ".join(unknown))

    for key in _PATH_KEYS:
        if data.get(key) is not None:
            setattr(cfg, key, _checked_path(key, data[key]))
    for key, expected in _SCALAR_KEYS.items():
        if data.get(key) is not None:
            setattr(cfg, key, _checked(key, data[key], expected))
    if data.get("threads") is not None:
        cfg.performance.threads = _checked("threads", data["threads"], int)

    _apply_section(cfg.runtime, "runtime", data.get("runtime"))
    _apply_section(cfg.performance, "performance", data.get("performance"))
    _apply_section(cfg.filters, "filters", data.get("filters"))
    return cfg


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
