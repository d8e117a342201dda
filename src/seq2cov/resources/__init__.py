"""Resource files and configuration templates."""


def get_default_config() -> str:
    """Return default configuration YAML content."""
    return """# seq2cov Configuration File

# Inputs (can be overridden by CLI arguments)
bam: ~
bed: ~
sample_name: ~
output: ~            # ~ or "-" writes the table to stdout

# Panel / output conventions
one_based: false           # panel starts are 1-based inclusive
mimic_perl_output: false   # Length = end - start + 1, as seq2c.pl reports it
group_genes: true          # add Whole-Gene rows
read_counts: false         # append a Reads column
strict_chromosomes: false  # fail when panel chromosomes are missing from the BAM header

# Runtime settings
runtime:
  log_level: "WARNING"
  log_file: ~
  enable_progress: true

# Performance settings
performance:
  threads: 1
  io_threads: 1
  queue_size: 64
  batch_size: 256
  strategy: "auto"         # auto | indexed | stream

# Read filters
filters:
  min_mapq: 0
  skip_unmapped: true
  skip_secondary: true
  skip_duplicate: true
  skip_supplementary: true
  skip_qcfail: false
"""
