"""Bookmark manager profile export/import."""

__version__ = "0.1.0"
