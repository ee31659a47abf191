"""Utility modules for Harmony Discover."""

from harmony_discover.utils.text import format_duration, generate_track_id

__all__ = ["generate_track_id", "format_duration"]
