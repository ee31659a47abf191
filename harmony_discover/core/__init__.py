"""Core modules for Harmony Discover."""

from harmony_discover.core.config import Settings, get_settings
from harmony_discover.core.models import (
    Artist,
    CatalogSnapshot,
    InteractionEvent,
    Recommendation,
    RecommendationContext,
    Track,
    UserProfile,
)

__all__ = [
    "Settings",
    "get_settings",
    "Track",
    "Artist",
    "UserProfile",
    "RecommendationContext",
    "Recommendation",
    "InteractionEvent",
    "CatalogSnapshot",
]
