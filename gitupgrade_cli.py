#!/usr/bin/env python3
"""
Synchronize a deployment directory with a remote Git branch.

Reads GITUPGRADE_* variables (or a .env file) and command-line options, then
exits 0 when the directory matches the remote branch and 1 otherwise.
"""

import sys

from gitupgrade.cli import main

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nUpgrade interrupted by user")
        sys.exit(1)
