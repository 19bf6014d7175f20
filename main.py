#!/usr/bin/env python3
"""
Arena rules engine - command line entry point.

Thin wrapper around arena.cli:
  python main.py formats
  python main.py resolve "OU"
  python main.py validate "OU" team.json
  python main.py audit
"""
import sys

from arena.cli import run

if __name__ == "__main__":
    sys.exit(run())
