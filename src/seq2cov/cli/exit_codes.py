"""Process exit statuses of ``seq2cov``.

A run succeeds (0), fails on bad input or data (1), is rejected by click
for bad usage (2), or is stopped by a signal, in which case the status is
128 + the signal number, as a shell reports for a killed process.
"""

import signal

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def signal_exit_code(signum: int) -> int:
    """Shell-style status of a process stopped by ``signum``."""
    return 128 + int(signum)


EXIT_SIGINT = signal_exit_code(signal.SIGINT)
EXIT_SIGTERM = signal_exit_code(signal.SIGTERM)
