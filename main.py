#!/usr/bin/env python3
"""
App Datasets - TrueNAS SCALE app dataset provisioner
Main entry point when run from a checkout instead of the installed script.
"""

import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(__file__))

from app_datasets.cli import main

if __name__ == "__main__":
    sys.exit(main())
