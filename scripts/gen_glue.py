#!/usr/bin/env python3
"""
gen_glue.py - C# glue generator entry point

Generates UnrealSharp glue for a native type graph.

Usage:
    python scripts/gen_glue.py --graph PATH [--module-graph PATH ...] [--output DIR]
"""

import os
import sys

# Add scripts directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, script_dir)

from glue_gen.cli import main


if __name__ == '__main__':
    sys.exit(main())
