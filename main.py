#!/usr/bin/env python3
"""wpgate command line (see `wpgate.cli`)."""

import sys

from wpgate.cli import main

if __name__ == "__main__":
    sys.exit(main())
