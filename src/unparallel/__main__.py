"""
Entry point for module execution (``python -m unparallel``).

This module delegates execution to the CLI handler in ``unparallel.cli.__main__``.
"""

import sys
from unparallel.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
