"""Merge sentinel-bounded hole report tables from a directory of workbooks into one CSV."""

__version__ = "0.1.0"
