"""Recommendation services for Harmony Discover."""

from harmony_discover.services.catalog import CatalogSource, CatalogStore, JsonCatalogSource, load_events
from harmony_discover.services.engine import RecommendationEngine
from harmony_discover.services.profiles import UserProfileStore, user_similarity
from harmony_discover.services.similarity import SimilarityIndex, track_similarity

__all__ = [
    "CatalogSource",
    "CatalogStore",
    "JsonCatalogSource",
    "load_events",
    "RecommendationEngine",
    "UserProfileStore",
    "user_similarity",
    "SimilarityIndex",
    "track_similarity",
]
