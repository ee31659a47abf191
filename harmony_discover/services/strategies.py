"""Scoring strategies that propose candidate tracks.

Every strategy is a pure function of the request context: it reads the
catalog, similarity matrix and profile store but never mutates them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from harmony_discover.core.models import (
    Activity,
    Mood,
    RecommendationContext,
    StrategyName,
    TimeOfDay,
    Track,
)
from harmony_discover.services.catalog import CatalogStore
from harmony_discover.services.profiles import UserProfileStore
from harmony_discover.services.similarity import SimilarityIndex

# Genre tables for contextual matching
TIME_OF_DAY_GENRES: dict[TimeOfDay, tuple[str, ...]] = {
    "morning": ("Ambient", "Chillout"),
    "afternoon": ("Pop", "Rock"),
    "evening": ("Electronic", "Jazz"),
    "night": ("Ambient", "Blues"),
}

MOOD_GENRES: dict[Mood, tuple[str, ...]] = {
    "happy": ("Pop", "Electronic"),
    "sad": ("Blues", "Folk"),
    "energetic": ("Rock", "Electronic"),
    "calm": ("Ambient", "Classical"),
    "focused": ("Ambient", "Instrumental"),
}

ACTIVITY_GENRES: dict[Activity, tuple[str, ...]] = {
    "working": ("Ambient", "Instrumental"),
    "exercising": ("Electronic", "Rock"),
    "relaxing": ("Ambient", "Jazz"),
    "socializing": ("Pop", "Hip-Hop"),
}


@dataclass
class Candidate:
    """One strategy's vote for a track, before weighting and merging."""

    track: Track
    score: float
    reason: str
    confidence: float
    strategy: StrategyName


class RecommendationStrategy(ABC):
    """Base class for scorers plugged into the engine."""

    name: StrategyName

    @abstractmethod
    def recommend(self, context: RecommendationContext, limit: int) -> list[Candidate]:
        """Propose candidates for ``context`` with raw (unweighted) scores."""


class CollaborativeStrategy(RecommendationStrategy):
    """Tracks played by listeners with similar taste that the user hasn't heard."""

    name: StrategyName = "collaborative"
    REASON = "Liked by users with similar taste"

    def __init__(self, profiles: UserProfileStore):
        self.profiles = profiles

    def recommend(self, context: RecommendationContext, limit: int) -> list[Candidate]:
        profile = context.user_profile
        if profile is None:
            return []

        heard = profile.history_track_ids
        candidates: list[Candidate] = []
        for similar in self.profiles.find_similar_users(profile):
            other = similar.profile
            for track in list(other.recent_tracks):
                if track.id in heard:
                    continue
                candidates.append(
                    Candidate(
                        track=track,
                        score=similar.similarity * other.play_counts.get(track.id, 0),
                        reason=self.REASON,
                        confidence=similar.similarity,
                        strategy=self.name,
                    )
                )
        return candidates


class ContentBasedStrategy(RecommendationStrategy):
    """Tracks similar to the one currently playing."""

    name: StrategyName = "content_based"
    SIMILARITY_THRESHOLD = 0.3

    def __init__(self, catalog: CatalogStore, similarity: SimilarityIndex):
        self.catalog = catalog
        self.similarity = similarity

    def recommend(self, context: RecommendationContext, limit: int) -> list[Candidate]:
        seed = context.current_track
        if seed is None:
            return []

        candidates: list[Candidate] = []
        for track_id, score in self.similarity.row(seed.id).items():
            if score <= self.SIMILARITY_THRESHOLD:
                continue
            track = self.catalog.find(track_id)
            if track is None:
                continue
            candidates.append(
                Candidate(
                    track=track,
                    score=score,
                    reason=f'Similar to "{seed.title}"',
                    confidence=score,
                    strategy=self.name,
                )
            )
        return candidates


class ContextualStrategy(RecommendationStrategy):
    """Genre picks for the listener's time of day, mood and activity."""

    name: StrategyName = "contextual"

    TIME_SCORE, TIME_CONFIDENCE = 0.8, 0.7
    MOOD_SCORE, MOOD_CONFIDENCE = 0.7, 0.6
    ACTIVITY_SCORE, ACTIVITY_CONFIDENCE = 0.6, 0.5

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def recommend(self, context: RecommendationContext, limit: int) -> list[Candidate]:
        candidates: list[Candidate] = []

        if context.time_of_day:
            candidates += self._matching(
                TIME_OF_DAY_GENRES.get(context.time_of_day, ()),
                self.TIME_SCORE,
                self.TIME_CONFIDENCE,
                f"Perfect for {context.time_of_day}",
            )
        if context.mood:
            candidates += self._matching(
                MOOD_GENRES.get(context.mood, ()),
                self.MOOD_SCORE,
                self.MOOD_CONFIDENCE,
                f"Matches your {context.mood} mood",
            )
        if context.activity:
            candidates += self._matching(
                ACTIVITY_GENRES.get(context.activity, ()),
                self.ACTIVITY_SCORE,
                self.ACTIVITY_CONFIDENCE,
                f"Great for {context.activity}",
            )
        return candidates

    def _matching(self, genres: tuple[str, ...], score: float, confidence: float, reason: str) -> list[Candidate]:
        return [
            Candidate(track=track, score=score, reason=reason, confidence=confidence, strategy=self.name)
            for track in self.catalog.tracks_in_genres(genres)
        ]


class TrendingStrategy(RecommendationStrategy):
    """Most-played tracks across the whole catalog."""

    name: StrategyName = "trending"
    REASON = "Trending right now"
    MIN_PLAY_COUNT = 1000
    SCORE = 0.5
    CONFIDENCE = 0.4

    def __init__(self, catalog: CatalogStore):
        self.catalog = catalog

    def trending_tracks(self, limit: int) -> list[Track]:
        """Tracks above the popularity floor, most played first."""
        popular = [t for t in self.catalog.tracks if t.play_count > self.MIN_PLAY_COUNT]
        popular.sort(key=lambda t: t.play_count, reverse=True)
        return popular[:limit]

    def recommend(self, context: RecommendationContext, limit: int) -> list[Candidate]:
        return [
            Candidate(
                track=track,
                score=self.SCORE,
                reason=self.REASON,
                confidence=self.CONFIDENCE,
                strategy=self.name,
            )
            for track in self.trending_tracks(limit)
        ]
