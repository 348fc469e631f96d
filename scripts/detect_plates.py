"""Startup script for the plate detection runner."""

import sys

from platedetector.cli import main

if __name__ == "__main__":
    sys.exit(main())
