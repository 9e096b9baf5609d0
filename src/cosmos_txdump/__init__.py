"""Cosmos transaction dump - fetch, normalize and export chain transactions"""

__version__ = "0.1.0"
