#!/usr/bin/env python3
"""
ATM Ledger Entry Point

Starts the interactive ATM menu. History is loaded from transactions.json
(or transactions.csv) and written back to both on exit.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from atm_ledger.cli import main


if __name__ == "__main__":
    sys.exit(main())
