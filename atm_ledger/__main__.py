#!/usr/bin/env python3
"""Main entry point for the ATM menu"""

import sys

from atm_ledger.cli import main

if __name__ == "__main__":
    sys.exit(main())
