#!/usr/bin/env python3
"""
Launcher for the trirk chat client (same as the ``trirk`` console script)
"""

from trirk.main import run

if __name__ == "__main__":
    run()
