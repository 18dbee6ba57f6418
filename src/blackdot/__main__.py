"""Allow ``python -m blackdot``."""
from __future__ import annotations

import sys

from blackdot.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
