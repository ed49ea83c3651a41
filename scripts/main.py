#!/usr/bin/env python3
"""
PartsFlow Hub - Main Script
Runs the command line shell from a source checkout.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from partsflow.cli import main

if __name__ == "__main__":
    sys.exit(main())
