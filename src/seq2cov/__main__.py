"""Allow ``python -m seq2cov``."""

import sys

from seq2cov.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
