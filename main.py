#!/usr/bin/env python3
"""
DNS Migrator - Main Entry Point

Runs the command line interface; equivalent to the dns-migrator script.
"""

from dns_migrator.cli.main import main

if __name__ == "__main__":
    main()
