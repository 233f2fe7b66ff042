"""
Entry point for running tapo_locator as a module.

This allows the package to be executed with: python -m tapo_locator
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
