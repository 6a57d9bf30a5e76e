"""Kindle KRDS - codec for Kindle reader and timer data files."""

__version__ = "0.1.0"
