"""
Main entry point for golf lesson application.
"""

import sys
from golflesson.cli import main

if __name__ == "__main__":
    sys.exit(main())
