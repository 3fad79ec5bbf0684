"""
Entry point script for running meshful from a source checkout.

Usage:
    python main.py info part.stl
    python main.py convert part.stl part.obj

See ``meshful.cli`` for all commands and options.
"""

import sys

from meshful.cli import main

if __name__ == "__main__":
    sys.exit(main())
