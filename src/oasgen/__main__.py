"""
Main entry point for oasgen when run as a module.

Allows execution via: python -m oasgen

oasgen/src/oasgen/__main__.py
"""

from .cli import main

if __name__ == "__main__":
    main()
