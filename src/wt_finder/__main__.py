"""Entry point for ``python -m wt_finder``."""

import sys

from .app import main

if __name__ == "__main__":
    sys.exit(main())
