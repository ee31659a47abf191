"""Text helpers for Harmony Discover."""

import re

from slugify import slugify


def generate_track_id(artist: str, title: str) -> str:
    """Generate a stable track ID from artist and title.

    Parenthetical and bracketed title suffixes ("(Radio Edit)", "[Live]")
    are dropped so alternate releases collapse to the same slug, e.g.
    "synthmaster-electronic-dreams".
    """
    title = re.sub(r"\s*[\(\[][^\)\]]*[\)\]]", "", title)
    return slugify(f"{artist.strip()}-{title.strip()}", lowercase=True)


def format_duration(seconds: int | None) -> str:
    """Format a duration in seconds as m:ss ("-" when unknown)."""
    if seconds is None or seconds < 0:
        return "-"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"
