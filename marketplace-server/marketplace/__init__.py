"""Collectibles marketplace settlement server."""

__version__ = "0.1.0"
