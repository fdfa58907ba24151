#!/usr/bin/env python3
"""Main CLI entry point for the cricket stats tracker."""

from cricket_stats.cli.main import app

if __name__ == '__main__':
    app()
