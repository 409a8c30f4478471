"""Collect news from RSS feeds and HTML listing pages into a local store."""

__version__ = "0.1.0"
