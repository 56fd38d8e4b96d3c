#!/usr/bin/env python3
"""
Main entry point for running markdown_alternate as a module.
This allows running the package with `python -m markdown_alternate`.
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
