#!/usr/bin/env python3
"""
credential - CLI Entry Point

Runs the credential command line interface from a source checkout,
without installing the package.

Usage:
    python python-cli/main.py hash [PASSWORD]
    python python-cli/main.py verify RECORD PASSWORD
    python python-cli/main.py expired RECORD [DAYS]
"""

import sys
from pathlib import Path

# Add python-core to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'python-core'))

from credential.cli import main


if __name__ == "__main__":
    main()
