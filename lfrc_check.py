#!/usr/bin/env python3
"""
lfrc checker entry point.

Usage: python lfrc_check.py lfrc [more scripts...] [-c SCRIPT] [--dump] [--verbose]
"""

from lfrc.checker import main

if __name__ == '__main__':
    main()
