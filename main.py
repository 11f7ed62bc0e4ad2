#!/usr/bin/env python3
"""Thin wrapper: run pylet CLI. Usage: python main.py <cmd> ... (same as the pylet console script)."""

import sys

if __name__ == "__main__":
    from pylet.cli import main
    sys.exit(main())
