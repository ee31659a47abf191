"""Command line interface for Harmony Discover."""
