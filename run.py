#!/usr/bin/env python3
"""
Racecard Parser - Main Execution Entry Point

e.g. python run.py schedule horse/today --upcoming
     python run.py race-card /horse-racing/australia-nz/ipswich/race-3-9733774
"""

import sys

from racecard_parser.main import main


if __name__ == "__main__":
    sys.exit(main())
