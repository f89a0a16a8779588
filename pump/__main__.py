"""Allow running Pump as ``python -m pump``."""

import sys

from pump.infrastructure.cli.app import main

if __name__ == "__main__":
    sys.exit(main())
