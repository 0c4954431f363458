#!/usr/bin/env python
"""
Start the Market Analysis CLI
"""
from market_analysis.cli.main import app

if __name__ == "__main__":
    app()
