#!/usr/bin/env python3
"""
lightga CLI - Minimal entry point.

Runs the genetic engine on the jump finder sample problem. All engine and
run parameters are specified in a YAML file.

Usage:
    python3 lightga_cli.py config.yaml
    python3 lightga_cli.py config.yaml --seed 7 --target 500
    python3 lightga_cli.py --help

Examples:
    # Optimise with the shipped configuration
    python3 lightga_cli.py config.yaml

    # Log every generation
    python3 lightga_cli.py config.yaml --verbose
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from lightga.cli import main


if __name__ == '__main__':
    sys.exit(main())
