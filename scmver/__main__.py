"""
Entry point for python -m scmver

Allows running the package as a module:
    python -m scmver
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
