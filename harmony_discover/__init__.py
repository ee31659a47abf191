"""Harmony Discover - multi-strategy music recommendations."""

__version__ = "0.1.0"
