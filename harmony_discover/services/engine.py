"""Recommendation engine: runs every strategy and blends the results.

The engine owns no global state. Callers hand it a catalog store and a
profile store, feed interaction events through ``update_user_profile`` and
ask for rankings with ``get_recommendations``.
"""

import logging

from harmony_discover.core.config import Settings, get_settings
from harmony_discover.core.exceptions import ValidationError
from harmony_discover.core.models import (
    Activity,
    InteractionAction,
    InteractionEvent,
    Mood,
    Recommendation,
    RecommendationContext,
    TimeOfDay,
    Track,
    UserProfile,
)
from harmony_discover.services.blender import STRATEGY_WEIGHTS, apply_weight, rank
from harmony_discover.services.catalog import CatalogSource, CatalogStore
from harmony_discover.services.profiles import UserProfileStore
from harmony_discover.services.similarity import SimilarityIndex
from harmony_discover.services.strategies import (
    ACTIVITY_GENRES,
    MOOD_GENRES,
    TIME_OF_DAY_GENRES,
    Candidate,
    CollaborativeStrategy,
    ContentBasedStrategy,
    ContextualStrategy,
    RecommendationStrategy,
    TrendingStrategy,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPLANATION = "Recommended based on your listening history and similar user preferences"


class RecommendationEngine:
    """Multi-strategy track recommender.

    Strategies run in a fixed order (collaborative, content-based,
    contextual, trending) and each one's raw scores are scaled by its
    weight before merging:
    - Collaborative filtering: 0.4
    - Content similarity: 0.3
    - Context (time of day, mood, activity): 0.2
    - Trending: 0.1
    """

    def __init__(
        self,
        catalog: CatalogStore | None = None,
        profiles: UserProfileStore | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the engine.

        Args:
            catalog: Catalog store (an empty one is created if omitted).
            profiles: Profile store (an empty one is created if omitted).
            settings: Settings; defaults to the cached environment settings.
        """
        self.catalog = catalog if catalog is not None else CatalogStore()
        self.profiles = profiles if profiles is not None else UserProfileStore()
        self.settings = settings or get_settings()
        self.similarity = SimilarityIndex(self.catalog)

        self.trending = TrendingStrategy(self.catalog)
        self.strategies: list[RecommendationStrategy] = [
            CollaborativeStrategy(self.profiles),
            ContentBasedStrategy(self.catalog, self.similarity),
            ContextualStrategy(self.catalog),
            self.trending,
        ]

    async def refresh_catalog(self, source: CatalogSource) -> None:
        """Reload the catalog from ``source`` and rebuild the similarity matrix."""
        tracks = await source.fetch_tracks()
        artists = await source.fetch_artists()
        self.catalog.replace(tracks, artists)
        self.similarity.rebuild()

    def update_user_profile(self, user_id: str, track: Track, action: InteractionAction) -> UserProfile:
        """Record a play, skip or like for ``user_id``."""
        return self.profiles.update(user_id, track, action)

    def record_event(self, event: InteractionEvent) -> UserProfile:
        """Record an interaction event referencing a catalog track by ID.

        Raises:
            NotFoundError: If the event's track is not in the catalog.
        """
        track = self.catalog.get(event.track_id)
        return self.update_user_profile(event.user_id, track, event.action)

    def build_context(
        self,
        user_id: str | None = None,
        current_track_id: str | None = None,
        time_of_day: TimeOfDay | None = None,
        mood: Mood | None = None,
        activity: Activity | None = None,
        limit: int | None = None,
    ) -> RecommendationContext:
        """Assemble a request context from IDs.

        Unknown users simply get no profile.

        Raises:
            NotFoundError: If ``current_track_id`` is not in the catalog.
        """
        profile = self.profiles.get(user_id) if user_id else None
        current_track = self.catalog.get(current_track_id) if current_track_id else None
        return RecommendationContext(
            current_track=current_track,
            recent_tracks=profile.recent_tracks[:] if profile else [],
            user_profile=profile,
            time_of_day=time_of_day,
            mood=mood,
            activity=activity,
            limit=limit or self.settings.default_limit,
        )

    async def get_recommendations(
        self,
        context: RecommendationContext,
        limit: int | None = None,
    ) -> list[Recommendation]:
        """Rank tracks for ``context``.

        Args:
            context: Request context; missing fields just mean the
                corresponding strategy has nothing to add.
            limit: Number of results, defaults to ``context.limit``.

        Returns:
            Recommendations sorted by combined score, at most ``limit`` long.
            Empty when no strategy produced a candidate.

        Raises:
            ValidationError: If ``limit`` is less than 1.
        """
        limit = context.limit if limit is None else limit
        if limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}")

        weighted: list[Candidate] = []
        for strategy in self.strategies:
            candidates = self._run_strategy(strategy, context, limit)
            weighted += apply_weight(candidates, STRATEGY_WEIGHTS[strategy.name])

        results = rank(weighted, limit)
        logger.debug(f"Ranked {len(weighted)} candidates into {len(results)} recommendations")
        return results

    def _run_strategy(
        self,
        strategy: RecommendationStrategy,
        context: RecommendationContext,
        limit: int,
    ) -> list[Candidate]:
        try:
            candidates = strategy.recommend(context, limit)
        except Exception:
            logger.exception(f"Strategy {strategy.name} failed; skipping its candidates")
            return []
        logger.debug(f"Strategy {strategy.name} produced {len(candidates)} candidates")
        return candidates

    def similar_tracks(self, track_id: str, limit: int = 10) -> list[tuple[Track, float]]:
        """Nearest neighbours of a catalog track.

        Raises:
            NotFoundError: If the track is not in the catalog.
        """
        self.catalog.get(track_id)
        results = []
        for other_id, score in self.similarity.nearest(track_id, limit=limit):
            track = self.catalog.find(other_id)
            if track is not None:
                results.append((track, score))
        return results

    def get_recommendation_explanation(self, track: Track, context: RecommendationContext) -> str:
        """Human-readable justification for recommending ``track``.

        Best effort: lists the signals the track matches in ``context``
        rather than replaying the full scoring path.
        """
        reasons: list[str] = []

        profile = context.user_profile
        if profile is not None:
            if track.genre in profile.favorite_genres:
                reasons.append(f"you like {track.genre}")
            if track.artist in profile.favorite_artists:
                reasons.append(f"you like {track.artist}")

        seed = context.current_track
        if seed is not None and seed.id != track.id:
            if self.similarity.similarity(seed.id, track.id) > ContentBasedStrategy.SIMILARITY_THRESHOLD:
                reasons.append(f'it is similar to "{seed.title}"')

        if context.time_of_day and track.genre in TIME_OF_DAY_GENRES.get(context.time_of_day, ()):
            reasons.append(f"it suits the {context.time_of_day}")
        if context.mood and track.genre in MOOD_GENRES.get(context.mood, ()):
            reasons.append(f"it fits your {context.mood} mood")
        if context.activity and track.genre in ACTIVITY_GENRES.get(context.activity, ()):
            reasons.append(f"it works for {context.activity}")

        if track.play_count > TrendingStrategy.MIN_PLAY_COUNT:
            reasons.append("it is trending right now")

        artist = self.catalog.find_artist(track.artist)
        if artist is not None and artist.is_verified:
            reasons.append(f"{artist.name} is a verified artist")

        if not reasons:
            return DEFAULT_EXPLANATION
        if len(reasons) == 1:
            return f"Recommended because {reasons[0]}"
        return f"Recommended because {', '.join(reasons[:-1])} and {reasons[-1]}"
