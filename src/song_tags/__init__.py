"""Bulk genre tag lookup for songs listed in a CSV file."""

__version__ = "0.1.0"
