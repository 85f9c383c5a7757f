#!/usr/bin/env python3
"""
Startup script for fetching the punch history without installing the package.
"""
import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from timeclock.fetch_history import run

if __name__ == "__main__":
    run()
