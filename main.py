#!/usr/bin/env python3
"""
Body-gesture flight navigation - launcher.

Runs bodynav from a source checkout without installing it.

Usage:
    python main.py --synthetic --mode demo      # built-in walkthrough, no keys sent
    python main.py --replay session.jsonl       # drive the target application
"""

import os
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from bodynav.app import main

if __name__ == "__main__":
    sys.exit(main())
