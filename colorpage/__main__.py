"""
Main entry point for the colorpage package.

Allows running: python -m colorpage <command>
"""

import sys

from colorpage.cli import main

if __name__ == "__main__":
    sys.exit(main())
