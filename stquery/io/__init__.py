"""
stquery I/O

Loading records from tabular files.
"""

from stquery.io.loader import read_records

__all__ = ["read_records"]
